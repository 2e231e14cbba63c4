import math

import pytest

from geoanchor.base_structures import GeoPoint, LocalVector
from geoanchor.geo import geomath

ORIGIN = GeoPoint(51.5007, -0.1246)

SAMPLE_POINTS = [
    GeoPoint(0.0, 0.0),
    GeoPoint(51.5014, -0.1246),
    GeoPoint(-33.8568, 151.2153),
    GeoPoint(89.9, 10.0),
    GeoPoint(-89.9, -170.0),
    GeoPoint(0.0, 180.0),
    GeoPoint(37.5666, 126.9783),
]


@pytest.mark.parametrize("a", SAMPLE_POINTS)
def test_bearing_in_range_and_zero_to_self(a):
    for b in SAMPLE_POINTS:
        assert 0.0 <= geomath.bearing(a, b) < 360.0
    assert geomath.bearing(a, a) == 0.0


def test_bearing_ignores_altitude_for_degenerate_case():
    assert geomath.bearing(GeoPoint(10.0, 20.0, 5.0), GeoPoint(10.0, 20.0, 50.0)) == 0.0


def test_bearing_cardinal_directions():
    o = GeoPoint(0.0, 0.0)
    assert geomath.bearing(o, GeoPoint(1.0, 0.0)) == pytest.approx(0.0, abs=1e-9)
    assert geomath.bearing(o, GeoPoint(0.0, 1.0)) == pytest.approx(90.0)
    assert geomath.bearing(o, GeoPoint(-1.0, 0.0)) == pytest.approx(180.0)
    assert geomath.bearing(o, GeoPoint(0.0, -1.0)) == pytest.approx(270.0)


def test_distance_symmetric_and_zero():
    for a in SAMPLE_POINTS:
        assert geomath.distance(a, a) == 0.0
        for b in SAMPLE_POINTS:
            assert geomath.distance(a, b) == pytest.approx(geomath.distance(b, a))


def test_distance_one_degree_of_latitude():
    d = geomath.distance(GeoPoint(0.0, 0.0), GeoPoint(1.0, 0.0))
    assert d == pytest.approx(geomath.EARTH_RADIUS_M * math.pi / 180.0)


def test_project_origin_onto_itself_is_zero():
    for o in SAMPLE_POINTS + [GeoPoint(12.0, 34.0, 100.0)]:
        assert geomath.project(o, o) == LocalVector(0.0, 0.0, 0.0)


def test_project_small_offset_north():
    v = geomath.project(GeoPoint(0.0, 0.0), GeoPoint(0.001, 0.0))
    assert v.x == pytest.approx(0.0, abs=1e-9)
    assert v.y == 0.0
    assert v.z == pytest.approx(111.0, rel=0.01)
    assert v.horizontal_norm() == pytest.approx(geomath.distance(GeoPoint(0.0, 0.0), GeoPoint(0.001, 0.0)))


def test_project_london_example():
    point = GeoPoint(51.5014, -0.1246)
    assert geomath.bearing(ORIGIN, point) == pytest.approx(0.0, abs=1e-6)
    assert geomath.distance(ORIGIN, point) == pytest.approx(78.0, abs=0.5)
    v = geomath.project(ORIGIN, point)
    assert v.x == pytest.approx(0.0, abs=1e-6)
    assert v.z == pytest.approx(78.0, abs=0.5)


def test_project_offset_magnitude_matches_distance_short_range():
    point = GeoPoint(51.5030, -0.1210)
    d = geomath.distance(ORIGIN, point)
    assert d < 500.0
    v = geomath.project(ORIGIN, point)
    assert v.x > 0 and v.z > 0
    assert v.horizontal_norm() == pytest.approx(d, rel=0.01)


def test_project_altitude_delta():
    o = GeoPoint(0.0, 0.0, 10.0)
    assert geomath.project(o, GeoPoint(0.0, 0.0, 15.0)).y == pytest.approx(5.0)
    assert geomath.project(o, GeoPoint(0.0, 0.0)).y == 0.0
    assert geomath.project(GeoPoint(0.0, 0.0), GeoPoint(0.0, 0.0, 15.0)).y == 0.0
    assert geomath.project(o, GeoPoint(0.0, 0.0, 15.0), use_altitude=False).y == 0.0


def test_destination_round_trips_bearing_and_distance():
    dest = geomath.destination(ORIGIN, 37.0, 250.0)
    assert geomath.distance(ORIGIN, dest) == pytest.approx(250.0, rel=1e-6)
    assert geomath.bearing(ORIGIN, dest) == pytest.approx(37.0, abs=1e-4)


def test_destination_keeps_altitude_and_zero_distance():
    src = GeoPoint(10.0, 10.0, 42.0)
    assert geomath.destination(src, 90.0, 0.0) is src
    assert geomath.destination(src, 90.0, 10.0).alt == 42.0


def test_destination_across_antimeridian_wraps_longitude():
    dest = geomath.destination(GeoPoint(0.0, 179.9999), 90.0, 100.0)
    assert -180.0 <= dest.lon < -179.99
