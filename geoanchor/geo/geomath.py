#!/usr/bin/env python3
"""
Spherical-earth helpers for placing geodetic points in a local AR frame.

- bearing: initial great-circle bearing, degrees clockwise from true north
- distance: Haversine great-circle distance (meters)
- destination: point reached by travelling a distance along a bearing
- project: geodetic point -> LocalVector relative to an origin

Notes
- A fixed mean Earth radius is used. Accuracy is adequate for sub-kilometer
  placement; this is not an ellipsoidal geodesic solution.
- `project` is a tangent-plane approximation: polar (distance, bearing) from the
  origin is laid flat. Error grows with range and near the poles.
"""
import math

from geoanchor.base_structures import GeoPoint, LocalVector
from geoanchor.tools.transforms import normalize_bearing

EARTH_RADIUS_M = 6_371_000.0


def bearing(source: GeoPoint, dest: GeoPoint) -> float:
    """Initial bearing from source to dest in [0, 360). Identical positions give 0."""
    if source.same_position(dest):
        return 0.0
    φ1, φ2 = math.radians(source.lat), math.radians(dest.lat)
    Δλ = math.radians(dest.lon - source.lon)
    x = math.sin(Δλ) * math.cos(φ2)
    y = math.cos(φ1) * math.sin(φ2) - math.sin(φ1) * math.cos(φ2) * math.cos(Δλ)
    return normalize_bearing(math.degrees(math.atan2(x, y)))


def distance(source: GeoPoint, dest: GeoPoint) -> float:
    """Haversine great-circle distance in meters."""
    φ1, φ2 = math.radians(source.lat), math.radians(dest.lat)
    Δφ = φ2 - φ1
    Δλ = math.radians(dest.lon - source.lon)
    a = math.sin(Δφ / 2) ** 2 + math.cos(φ1) * math.cos(φ2) * math.sin(Δλ / 2) ** 2
    # rounding can push a a hair above 1 for antipodal points
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def destination(source: GeoPoint, bearing_deg: float, distance_m: float) -> GeoPoint:
    """Point reached from source after distance_m meters along bearing_deg (altitude kept)."""
    if distance_m == 0:
        return source
    δ = float(distance_m) / EARTH_RADIUS_M
    θ = math.radians(bearing_deg)
    φ1 = math.radians(source.lat)
    λ1 = math.radians(source.lon)
    sin_φ2 = math.sin(φ1) * math.cos(δ) + math.cos(φ1) * math.sin(δ) * math.cos(θ)
    φ2 = math.asin(max(-1.0, min(1.0, sin_φ2)))
    λ2 = λ1 + math.atan2(math.sin(θ) * math.sin(δ) * math.cos(φ1),
                         math.cos(δ) - math.sin(φ1) * sin_φ2)
    return GeoPoint(math.degrees(φ2), math.degrees(λ2), source.alt)


def project(origin: GeoPoint, point: GeoPoint, use_altitude: bool = True) -> LocalVector:
    """Project point into the tangent plane at origin: +x east, +z north, +y up."""
    d = distance(origin, point)
    b = math.radians(bearing(origin, point))
    dy = 0.0
    if use_altitude and origin.alt is not None and point.alt is not None:
        dy = point.alt - origin.alt
    return LocalVector(x=d * math.sin(b), y=dy, z=d * math.cos(b))
