import pytest

from geoanchor.anchor.world_anchor import AnchorState, WorldAnchor
from geoanchor.base_structures import GeoPoint
from geoanchor.errors import AnchorNotReady


@pytest.fixture
def anchor():
    return WorldAnchor(clock=lambda: 1234.5)


def test_project_fails_before_first_fix(anchor):
    assert anchor.state is AnchorState.UNINITIALIZED
    assert not anchor.initialized
    with pytest.raises(AnchorNotReady):
        anchor.project(GeoPoint(0.0, 0.0))


def test_initialize_anchors_and_is_noop_while_anchored(anchor):
    assert anchor.initialize(GeoPoint(0.0, 0.0), timestamp=10.0) is True
    assert anchor.state is AnchorState.ANCHORED
    assert anchor.initialized_at == 10.0

    assert anchor.initialize(GeoPoint(1.0, 1.0), timestamp=20.0) is False
    assert anchor.origin == GeoPoint(0.0, 0.0)
    assert anchor.initialized_at == 10.0


def test_initialize_with_reset_moves_origin(anchor):
    anchor.initialize(GeoPoint(0.0, 0.0), timestamp=10.0)
    assert anchor.initialize(GeoPoint(1.0, 1.0), timestamp=20.0, reset=True) is True
    assert anchor.origin == GeoPoint(1.0, 1.0)
    assert anchor.initialized_at == 20.0


def test_initialized_at_defaults_to_clock(anchor):
    anchor.initialize(GeoPoint(0.0, 0.0))
    assert anchor.initialized_at == 1234.5


def test_reset_makes_projection_fail_again(anchor):
    anchor.initialize(GeoPoint(0.0, 0.0), timestamp=1.0)
    anchor.project(GeoPoint(0.001, 0.0))
    anchor.reset()
    assert anchor.state is AnchorState.UNINITIALIZED
    assert anchor.origin is None
    assert anchor.initialized_at is None
    with pytest.raises(AnchorNotReady):
        anchor.project(GeoPoint(0.001, 0.0))


def test_project_delegates_to_tangent_plane(anchor):
    anchor.initialize(GeoPoint(0.0, 0.0, 5.0), timestamp=1.0)
    v = anchor.project(GeoPoint(0.001, 0.0, 7.0))
    assert v.z == pytest.approx(111.19, rel=0.01)
    assert v.y == pytest.approx(2.0)


def test_use_altitude_false_flattens():
    anchor = WorldAnchor(use_altitude=False)
    anchor.initialize(GeoPoint(0.0, 0.0, 5.0), timestamp=1.0)
    assert anchor.project(GeoPoint(0.001, 0.0, 7.0)).y == 0.0


def test_heading_samples_do_not_rotate_north_aligned_frame(anchor):
    assert anchor.current_heading() is None
    anchor.update_heading(-10.0)
    assert anchor.current_heading() == pytest.approx(350.0)
    anchor.initialize(GeoPoint(0.0, 0.0), timestamp=1.0)
    assert anchor.heading_reference == 0.0
    v = anchor.project(GeoPoint(0.0, 0.001))
    assert v.x == pytest.approx(111.19, rel=0.01)
    assert v.z == pytest.approx(0.0, abs=1e-6)


def test_align_to_heading_rotates_frame_to_anchor_heading():
    anchor = WorldAnchor(align_to_heading=True)
    anchor.update_heading(90.0)
    anchor.initialize(GeoPoint(0.0, 0.0), timestamp=1.0)
    assert anchor.heading_reference == pytest.approx(90.0)

    # due east is straight ahead in a frame facing east
    v = anchor.project(GeoPoint(0.0, 0.001))
    assert v.z == pytest.approx(111.19, rel=0.01)
    assert v.x == pytest.approx(0.0, abs=1e-6)

    # later heading samples leave the frame alone
    anchor.update_heading(180.0)
    assert anchor.heading_reference == pytest.approx(90.0)


def test_align_to_heading_without_sample_falls_back_to_north():
    anchor = WorldAnchor(align_to_heading=True)
    anchor.initialize(GeoPoint(0.0, 0.0), timestamp=1.0)
    assert anchor.heading_reference == 0.0


def test_snapshot_is_consistent_after_reset(anchor):
    anchor.update_heading(45.0)
    anchor.initialize(GeoPoint(0.0, 0.0), timestamp=1.0)
    snap = anchor.snapshot()
    anchor.reset()
    assert snap.ready
    assert snap.heading == pytest.approx(45.0)
    assert snap.project(GeoPoint(0.001, 0.0)).z == pytest.approx(111.19, rel=0.01)
    assert not anchor.snapshot().ready


def test_independent_instances(anchor):
    other = WorldAnchor()
    anchor.initialize(GeoPoint(0.0, 0.0), timestamp=1.0)
    assert other.state is AnchorState.UNINITIALIZED
