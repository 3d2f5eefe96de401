"""Core data structures and operations."""

from . import canon, exceptions, transform, types, utils, validate

__all__ = ["canon", "exceptions", "transform", "types", "utils", "validate"]
