"""Input normalisation: provider payloads and flat rows to readings frames."""

from . import ingest, types

__all__ = ["ingest", "types"]
