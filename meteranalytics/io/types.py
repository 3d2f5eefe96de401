from __future__ import annotations
from typing import Any, List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core import canon


class IntervalPoint(BaseModel):
    """A single provider point within a period.

    Attributes:
        position: 1-based offset within the period
        quantity: consumption in kWh (missing or malformed values read as 0.0)
        quality: provider quality code (e.g. 'A04' measured, 'A03' estimated)
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    position: int = Field(ge=1)
    quantity: float = Field(default=0.0, alias="out_Quantity.quantity")
    quality: str = Field(default=canon.DEFAULT_QUALITY, alias="out_Quantity.quality")

    @model_validator(mode="before")
    @classmethod
    def _flatten_quantity(cls, data: Any) -> Any:
        # Some feeds nest {"out_Quantity": {"quantity", "quality"}} instead of dotted keys
        if isinstance(data, dict) and isinstance(data.get("out_Quantity"), dict):
            nested = data["out_Quantity"]
            data = {k: v for k, v in data.items() if k != "out_Quantity"}
            data.setdefault("out_Quantity.quantity", nested.get("quantity"))
            data.setdefault("out_Quantity.quality", nested.get("quality"))
        return data

    @field_validator("quantity", mode="before")
    @classmethod
    def _coerce_quantity(cls, v: Any) -> float:
        try:
            q = float(v)
        except (TypeError, ValueError):
            return 0.0
        if q != q or q in (float("inf"), float("-inf")):
            return 0.0
        return abs(q)

    @field_validator("quality", mode="before")
    @classmethod
    def _coerce_quality(cls, v: Any) -> str:
        return canon.DEFAULT_QUALITY if v is None else str(v)


class Period(BaseModel):
    """A provider time window: absolute start plus raw points.

    Points stay raw here so one bad point can be dropped without
    failing the whole period.
    """
    model_config = ConfigDict(frozen=True)

    start: datetime
    resolution: Optional[str] = None
    points: List[dict] = Field(default_factory=list)


class Reading(BaseModel):
    """One absolute-time consumption reading."""
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    consumption: float = Field(ge=0.0)
    quality: str = canon.DEFAULT_QUALITY
