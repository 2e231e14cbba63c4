#!/usr/bin/env python3
"""
TrackedNode: a piece of AR content pinned to a geodetic location.

Each tick the host calls `update_placement(anchor, now)`, which projects the
node's location into the anchor frame, drops it by `device_height` so content
sits at floor level, and turns `bearing` into a rotation about +y.

With `interpolate_motion` the location is advanced along the last known course
at the last known speed for the time elapsed since the last fix. This smooths
motion between sparse GPS updates; it will overshoot if the target stops or
turns, and nothing corrects that. The pipeline feeds the device's own course
and speed to interpolated nodes through `update_motion`.

All times are on the feed clock (fix timestamps), never wall-clock time.
"""

import logging
from typing import Optional, Union

from scipy.spatial.transform import Rotation as R

from geoanchor.anchor.world_anchor import AnchorSnapshot, WorldAnchor
from geoanchor.base_structures import Fix, GeoPoint, LocalTransform, LocalVector
from geoanchor.errors import AnchorNotReady
from geoanchor.geo import geomath
from geoanchor.tools.transforms import normalize_bearing

DEFAULT_DEVICE_HEIGHT_M = 1.5


class TrackedNode:
    def __init__(self, location: GeoPoint, bearing=0.0, device_height=DEFAULT_DEVICE_HEIGHT_M,
                 interpolate_motion=False, name=None):
        """Create a node at `location` facing `bearing` (degrees from true north)."""
        self.name = name
        self.location = location
        self.bearing = normalize_bearing(bearing)
        self.device_height = float(device_height)
        self.interpolate_motion = bool(interpolate_motion)

        # Only touched by update_fix/update_motion, never by placement
        self.last_known_course: Optional[float] = None
        self.last_known_speed: Optional[float] = None
        self.last_fix_timestamp: Optional[float] = None

        self.local_transform: Optional[LocalTransform] = None

    @classmethod
    def create(cls, location: GeoPoint, bearing=0.0, **kwargs) -> "TrackedNode":
        return cls(location, bearing=bearing, **kwargs)

    def __repr__(self):
        return (f"TrackedNode(name={self.name!r}, lat={self.location.lat:.7f}, "
                f"lon={self.location.lon:.7f}, bearing={self.bearing:.1f})")

    def update_fix(self, fix: Fix) -> bool:
        """Apply a new fix for this entity. Stale or repeated timestamps are ignored.

        Course/speed are only replaced when the fix reports valid values
        (course in degrees, speed >= 0).
        """
        if not self.update_motion(fix.timestamp, fix.course, fix.speed):
            return False
        self.location = fix.point
        return True

    def update_motion(self, timestamp, course=None, speed=None) -> bool:
        """Record a course/speed sample without moving `location`.

        Used for the device's own motion when the node is interpolated. Stale or
        repeated timestamps are ignored; invalid course/speed keep the old values.
        """
        if self.last_fix_timestamp is not None and timestamp <= self.last_fix_timestamp:
            logging.debug(f"[NODE] {self.name}: ignoring stale sample t={timestamp}")
            return False
        self.last_fix_timestamp = float(timestamp)
        if course is not None and course >= 0:
            self.last_known_course = normalize_bearing(course)
        if speed is not None and speed >= 0:
            self.last_known_speed = float(speed)
        return True

    def predicted_location(self, now=None) -> GeoPoint:
        """Location extrapolated to `now` (feed clock), or the stored location when not interpolating.

        `now=None` means the time of the last fix, i.e. no extrapolation.
        """
        if (not self.interpolate_motion or self.last_fix_timestamp is None or now is None
                or self.last_known_course is None or self.last_known_speed is None):
            return self.location
        dt = max(0.0, float(now) - self.last_fix_timestamp)
        return geomath.destination(self.location, self.last_known_course, self.last_known_speed * dt)

    def update_placement(self, anchor: Union[WorldAnchor, AnchorSnapshot], now=None) -> Optional[LocalTransform]:
        """Recompute `local_transform` against `anchor` at feed time `now`.

        Returns the new transform, or None when the anchor is not ready; the
        previous transform is kept in that case.
        """
        snap = anchor.snapshot() if isinstance(anchor, WorldAnchor) else anchor
        try:
            offset = snap.project(self.predicted_location(now))
        except AnchorNotReady:
            logging.debug(f"[NODE] {self.name}: anchor not ready; keeping previous transform")
            return None

        position = offset - LocalVector(0.0, self.device_height, 0.0)
        yaw = normalize_bearing(self.bearing - snap.heading_reference)
        quat = R.from_euler("y", yaw, degrees=True).as_quat()
        self.local_transform = LocalTransform(
            position=position,
            yaw_deg=yaw,
            rotation=tuple(float(q) for q in quat),
        )
        return self.local_transform
