#!/usr/bin/env python3
import argparse

from geoanchor.base_structures import GeoPoint
from geoanchor.errors import InvalidCoordinate
from geoanchor.geo import geomath


def compute_metrics(origin, point):
    offset = geomath.project(origin, point)
    return {
        'bearing_deg': round(geomath.bearing(origin, point), 3),
        'distance_m': round(geomath.distance(origin, point), 3),
        'local_x_m': round(offset.x, 3),
        'local_y_m': round(offset.y, 3),
        'local_z_m': round(offset.z, 3),
    }


def main(argv=None):
    ap = argparse.ArgumentParser(description='Bearing, distance and local offset between two points')
    ap.add_argument('--origin', required=True, nargs='+', type=float, metavar='DEG', help='lat lon [alt]')
    ap.add_argument('--point', required=True, nargs='+', type=float, metavar='DEG', help='lat lon [alt]')
    args = ap.parse_args(argv)

    try:
        origin = GeoPoint(*args.origin[:3])
        point = GeoPoint(*args.point[:3])
    except (TypeError, InvalidCoordinate) as e:
        ap.error(str(e))

    m = compute_metrics(origin, point)
    for k, v in m.items():
        print(f"{k}: {v}")


if __name__ == '__main__':
    main()
