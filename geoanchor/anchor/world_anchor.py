#!/usr/bin/env python3
"""
WorldAnchor: the geodetic origin of the local AR frame.

State machine: UNINITIALIZED -> ANCHORED -> (reset) -> UNINITIALIZED

Notes
-----
- The origin is fixed once set. Re-centering on every fix would make
  already-placed content jitter; the cost is tangent-plane error for nodes far
  from the original anchor point.
- The frame's +z axis points to true north unless `align_to_heading` is set,
  in which case it points along the device heading captured at anchor time
  (`heading_reference`) and projections are rotated to match.
- `current_heading()` is the latest device heading sample. It never rotates the
  frame; the host uses it to orient the camera.
- Writes are serialized by a lock. Readers take a `snapshot()` so a node never
  sees an origin from one update and a heading from another.
"""

import enum
import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional

from scipy.spatial.transform import Rotation as R

from geoanchor.base_structures import GeoPoint, LocalVector
from geoanchor.errors import AnchorNotReady
from geoanchor.geo import geomath
from geoanchor.tools.transforms import normalize_bearing


class AnchorState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    ANCHORED = "anchored"


@dataclass(frozen=True)
class AnchorSnapshot:
    """Consistent read-only view of the anchor taken at one instant."""
    origin: Optional[GeoPoint]
    heading: Optional[float]
    heading_reference: float
    initialized_at: Optional[float]
    use_altitude: bool = True

    @property
    def ready(self) -> bool:
        return self.origin is not None

    def project(self, point: GeoPoint) -> LocalVector:
        """Project a geodetic point into the anchor frame; raises AnchorNotReady if unset."""
        if self.origin is None:
            raise AnchorNotReady("World anchor has no origin yet")
        v = geomath.project(self.origin, point, use_altitude=self.use_altitude)
        if self.heading_reference == 0.0:
            return v
        x, y, z = R.from_euler("y", -self.heading_reference, degrees=True).apply(v.as_array())
        return LocalVector(float(x), float(y), float(z))


class WorldAnchor:
    def __init__(self, align_to_heading=False, use_altitude=True, clock=time.time):
        """Create an unanchored world.

        Parameters
        ----------
        align_to_heading : bool
            If true, the frame's forward axis follows the heading at anchor time
            instead of true north.
        use_altitude : bool
            If false, altitude differences are ignored (y offset always 0).
        clock : callable
            Time source for `initialized_at` when no fix timestamp is given.
        """
        self.align_to_heading = bool(align_to_heading)
        self.use_altitude = bool(use_altitude)
        self._clock = clock
        self._lock = threading.Lock()
        self._origin = None
        self._initialized_at = None
        self._heading = None
        self._heading_reference = 0.0

    @property
    def state(self) -> AnchorState:
        with self._lock:
            return AnchorState.ANCHORED if self._origin is not None else AnchorState.UNINITIALIZED

    @property
    def initialized(self) -> bool:
        return self.state is AnchorState.ANCHORED

    @property
    def origin(self) -> Optional[GeoPoint]:
        with self._lock:
            return self._origin

    @property
    def initialized_at(self) -> Optional[float]:
        with self._lock:
            return self._initialized_at

    @property
    def heading_reference(self) -> float:
        with self._lock:
            return self._heading_reference

    def initialize(self, point: GeoPoint, timestamp=None, reset=False) -> bool:
        """Anchor the frame at `point`. Returns True if the origin changed.

        While anchored this is a no-op unless `reset` is true.
        """
        with self._lock:
            if self._origin is not None and not reset:
                return False
            self._origin = point
            self._initialized_at = float(timestamp) if timestamp is not None else self._clock()
            if self.align_to_heading and self._heading is not None:
                self._heading_reference = self._heading
            else:
                self._heading_reference = 0.0
            ref = self._heading_reference
        logging.info(f"[ANCHOR] Anchored at lat={point.lat:.7f} lon={point.lon:.7f} "
                     f"alt={point.alt} heading_ref={ref:.1f}")
        return True

    def reset(self):
        """Drop the origin; projections fail with AnchorNotReady until re-anchored."""
        with self._lock:
            was_anchored = self._origin is not None
            self._origin = None
            self._initialized_at = None
            self._heading_reference = 0.0
        if was_anchored:
            logging.info("[ANCHOR] Reset; waiting for next fix")

    def update_heading(self, heading_deg: float):
        """Store the latest device heading sample (degrees from true north)."""
        with self._lock:
            self._heading = normalize_bearing(heading_deg)

    def current_heading(self) -> Optional[float]:
        """Most recent device heading, or None before the first sample."""
        with self._lock:
            return self._heading

    def snapshot(self) -> AnchorSnapshot:
        with self._lock:
            return AnchorSnapshot(
                origin=self._origin,
                heading=self._heading,
                heading_reference=self._heading_reference,
                initialized_at=self._initialized_at,
                use_altitude=self.use_altitude,
            )

    def project(self, point: GeoPoint) -> LocalVector:
        """Project a geodetic point into the local frame; raises AnchorNotReady if unset."""
        return self.snapshot().project(point)
