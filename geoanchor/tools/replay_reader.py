#!/usr/bin/env python3
"""
replay_reader
-------------
Replay a recorded location feed through the geo-anchoring pipeline.

- Input CSV uses the format read by geoanchor.sensors.fix_replay
- Nodes are given as `lat,lon[,bearing]` (repeat --node)
- Frames are ticked at the configured rate between feed samples; each node's
  transform is printed after every fix
"""
import argparse
import sys

from geoanchor.base_structures import Fix, GeoPoint
from geoanchor.errors import InvalidCoordinate
from geoanchor.main_loop import GeoAnchorPipeline, load_config, setup_logging
from geoanchor.sensors.fix_replay import HeadingSample, load_samples


def parse_node(text):
    """Parse `lat,lon[,bearing]` into (GeoPoint, bearing)."""
    parts = [p.strip() for p in text.split(",")]
    if len(parts) not in (2, 3):
        raise argparse.ArgumentTypeError(f"expected lat,lon[,bearing], got {text!r}")
    try:
        point = GeoPoint(float(parts[0]), float(parts[1]))
        bearing = float(parts[2]) if len(parts) == 3 else 0.0
    except (ValueError, InvalidCoordinate) as e:
        raise argparse.ArgumentTypeError(str(e))
    return point, bearing


def format_transform(node):
    tf = node.local_transform
    if tf is None:
        return f"{node.name}: not placed"
    p = tf.position
    return f"{node.name}: x={p.x:.2f} y={p.y:.2f} z={p.z:.2f} yaw={tf.yaw_deg:.1f}"


def format_device(position):
    if position is None:
        return "device: not placed"
    return f"device: x={position.x:.2f} y={position.y:.2f} z={position.z:.2f}"


def replay(pipeline, samples, frame_rate_hz=30.0, out=None):
    """Feed samples into a started pipeline, ticking frames in feed time between them."""
    out = out or sys.stdout
    dt = 1.0 / frame_rate_hz if frame_rate_hz > 0 else None
    last_t = None
    for sample in samples:
        if dt is not None and last_t is not None:
            t = last_t + dt
            while t < sample.timestamp:
                pipeline.on_frame(t)
                t += dt
        if isinstance(sample, HeadingSample):
            pipeline.on_heading(sample.heading)
        elif isinstance(sample, Fix):
            pipeline.on_location(sample)
            print(f"t={sample.timestamp:.2f}", file=out)
            print("  " + format_device(pipeline.device_position()), file=out)
            for node in pipeline.nodes:
                print("  " + format_transform(node), file=out)
        last_t = sample.timestamp


def main(argv=None):
    """CLI: replay a CSV feed and print node placements."""
    ap = argparse.ArgumentParser()
    ap.add_argument('--csv', required=True, help='Recorded feed CSV (t,kind,lat,lon,alt,course,speed,heading)')
    ap.add_argument('--node', action='append', type=parse_node, default=[], help='Node as lat,lon[,bearing]')
    ap.add_argument('--config', default=None, help='YAML config path')
    ap.add_argument('--fps', type=float, default=None, help='Frame tick rate (defaults to runtime.frame_rate_hz)')
    ap.add_argument('--interpolate', action='store_true', help='Enable motion interpolation on nodes')
    args = ap.parse_args(argv)

    cfg = load_config(args.config)
    setup_logging(cfg)
    pipeline = GeoAnchorPipeline(cfg=cfg)
    for i, (point, bearing) in enumerate(args.node):
        kwargs = {"interpolate_motion": True} if args.interpolate else {}
        pipeline.create_node(point, bearing=bearing, name=f"node{i}", **kwargs)

    samples = load_samples(args.csv)
    if not samples:
        print('No samples found')
        return 1

    fps = args.fps if args.fps is not None else float(cfg.get("runtime", {}).get("frame_rate_hz", 30))
    pipeline.start()
    try:
        replay(pipeline, samples, frame_rate_hz=fps)
    finally:
        pipeline.stop()
    return 0


if __name__ == '__main__':
    sys.exit(main())
