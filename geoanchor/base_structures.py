from dataclasses import dataclass, field
from typing import Optional, Tuple
import math

import numpy as np

from geoanchor.errors import InvalidCoordinate
from geoanchor.tools.transforms import wrap_longitude

"""
Base data structures used across the geo-anchoring pipeline.

Currently provides:
- GeoPoint: validated geodetic location (distances live in geo.geomath).
- LocalVector: offset in the local AR frame (x=east, y=up, z=north, meters).
- Fix: a timestamped location sample with optional course/speed.
- LocalTransform: position + rotation written to tracked nodes.
"""


@dataclass(frozen=True)
class GeoPoint:
    """Geodetic location with latitude (deg), longitude (deg), optional altitude (m)."""
    lat: float
    lon: float
    alt: Optional[float] = None

    def __post_init__(self):
        try:
            lat = float(self.lat)
            lon = float(self.lon)
        except (TypeError, ValueError) as e:
            raise InvalidCoordinate(f"Non-numeric coordinate: {self.lat!r}, {self.lon!r}") from e
        if not (math.isfinite(lat) and math.isfinite(lon)):
            raise InvalidCoordinate(f"Non-finite coordinate: {lat}, {lon}",
                                    details={"lat": lat, "lon": lon})
        if not -90.0 <= lat <= 90.0:
            raise InvalidCoordinate(f"Latitude {lat} outside [-90, 90]", details={"lat": lat})
        alt = self.alt
        if alt is not None:
            alt = float(alt)
            if not math.isfinite(alt):
                raise InvalidCoordinate(f"Non-finite altitude: {alt}", details={"alt": alt})
        # frozen dataclass: normalized values go through object.__setattr__
        object.__setattr__(self, "lat", lat)
        object.__setattr__(self, "lon", wrap_longitude(lon))
        object.__setattr__(self, "alt", alt)

    def same_position(self, other: "GeoPoint") -> bool:
        """True when both points share latitude and longitude (altitude ignored)."""
        return self.lat == other.lat and self.lon == other.lon


@dataclass(frozen=True)
class LocalVector:
    """Offset in meters from the anchor origin: +x east, +y up, +z north."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: "LocalVector") -> "LocalVector":
        return LocalVector(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "LocalVector") -> "LocalVector":
        return LocalVector(self.x - other.x, self.y - other.y, self.z - other.z)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    def norm(self) -> float:
        return float(np.linalg.norm(self.as_array()))

    def horizontal_norm(self) -> float:
        """Length of the east/north component only."""
        return math.hypot(self.x, self.z)


@dataclass(frozen=True)
class Fix:
    """A location sample from the feed; course (deg) and speed (m/s) are None when invalid."""
    point: GeoPoint
    timestamp: float
    course: Optional[float] = None
    speed: Optional[float] = None


@dataclass(frozen=True)
class LocalTransform:
    """Placement written to a tracked node for the scene graph to apply."""
    position: LocalVector
    yaw_deg: float
    rotation: Tuple[float, float, float, float] = field(default=(0.0, 0.0, 0.0, 1.0))  # quaternion (x,y,z,w)
