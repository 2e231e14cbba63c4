#!/usr/bin/env python3
"""
Angle and coordinate normalization helpers for the geo-anchoring toolkit.
- normalize_bearing: normalize degrees to [0, 360)
- wrap_longitude: fold longitudes back into [-180, 180]
"""


def normalize_bearing(deg):
    """Wrap a bearing (degrees clockwise from north) to the range [0, 360)."""
    b = float(deg) % 360.0
    # -1e-17 % 360 rounds to 360.0
    return 0.0 if b >= 360.0 else b


def wrap_longitude(deg):
    """Longitudes already in [-180, 180] are kept; others wrap to [-180, 180)."""
    lon = float(deg)
    if -180.0 <= lon <= 180.0:
        return lon
    return (lon + 180.0) % 360.0 - 180.0
