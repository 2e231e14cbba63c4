#!/usr/bin/env python3
import math
import sys

import yaml

from geoanchor.anchor.world_anchor import WorldAnchor
from geoanchor.base_structures import Fix, GeoPoint
from geoanchor.errors import AnchorNotReady, InvalidCoordinate
from geoanchor.geo import geomath
from geoanchor.main_loop import load_config
from geoanchor.nodes.tracked_node import TrackedNode


def check_config():
    print('[SELF-CHECK] Config sanity...')
    cfg = load_config()
    h = cfg.get('nodes', {}).get('device_height_m', None)
    if not isinstance(h, (int, float)):
        print('  Warn: nodes.device_height_m missing or non-numeric; default 1.5 will be used')
    print('  OK')


def check_geomath():
    print('[SELF-CHECK] GeoMath...')
    origin = GeoPoint(51.5007, -0.1246)
    point = GeoPoint(51.5014, -0.1246)
    b = geomath.bearing(origin, point)
    d = geomath.distance(origin, point)
    v = geomath.project(origin, point)
    assert b < 0.01 or b > 359.99, f'bearing {b} not north'
    assert abs(d - 78.0) < 1.0, f'distance {d} not ~78 m'
    assert abs(v.x) < 0.01 and abs(v.z - d) < 0.01, f'projection {v} not due north'
    assert geomath.bearing(origin, origin) == 0.0, 'degenerate bearing not 0'
    print('  OK')


def check_anchor():
    print('[SELF-CHECK] WorldAnchor...')
    anchor = WorldAnchor()
    try:
        anchor.project(GeoPoint(0.0, 0.0))
        raise AssertionError('projection before first fix did not fail')
    except AnchorNotReady:
        pass
    anchor.initialize(GeoPoint(0.0, 0.0), timestamp=0.0)
    v = anchor.project(GeoPoint(0.001, 0.0))
    assert abs(v.z - 111.19) / 111.19 < 0.01, f'0.001 deg north gave {v}'
    try:
        GeoPoint(91.0, 0.0)
        raise AssertionError('latitude 91 accepted')
    except InvalidCoordinate:
        pass
    print('  OK')


def check_interpolation():
    print('[SELF-CHECK] TrackedNode interpolation...')
    anchor = WorldAnchor()
    anchor.initialize(GeoPoint(0.0, 0.0), timestamp=0.0)
    node = TrackedNode(GeoPoint(0.0005, 0.0), interpolate_motion=True)
    node.update_fix(Fix(GeoPoint(0.0005, 0.0), timestamp=10.0, course=90.0, speed=2.0))
    still = node.update_placement(anchor, now=10.0).position
    moved = node.update_placement(anchor, now=13.0).position
    assert math.isclose(moved.x - still.x, 6.0, abs_tol=0.05), f'dx={moved.x - still.x}'
    print('  OK')


def main():
    failures = 0
    for check in (check_geomath, check_anchor, check_interpolation):
        try:
            check()
        except AssertionError as e:
            print(f'[SELF-CHECK] {check.__name__} FAILED: {e}')
            failures += 1
    # Config sanity (non-fatal)
    try:
        check_config()
    except (OSError, yaml.YAMLError) as e:
        print(f'  Config check encountered an issue: {e}')

    if failures == 0:
        print('[SELF-CHECK] All required checks passed.')
        sys.exit(0)
    else:
        print(f'[SELF-CHECK] Failures: {failures}')
        sys.exit(1)


if __name__ == '__main__':
    main()
