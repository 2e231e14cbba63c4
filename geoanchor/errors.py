"""Errors raised by the geo-anchoring core."""

from typing import Any, Dict, Optional


class GeoAnchorError(Exception):
    code = "GEOANCHOR_ERROR"

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidCoordinate(GeoAnchorError, ValueError):
    """Latitude/longitude out of range or not a finite number."""
    code = "INVALID_COORDINATE"


class AnchorNotReady(GeoAnchorError):
    """Projection attempted before the first fix or after a reset.

    Transient: callers skip the placement and retry on the next tick.
    """
    code = "ANCHOR_NOT_READY"
