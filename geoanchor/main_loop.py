#!/usr/bin/env python3
"""
Geo-anchored AR runtime loop.

High-level flow
- Load configuration (anchor alignment, node defaults, logging)
- Own one WorldAnchor and the set of TrackedNodes placed in the world
- The host forwards its location feed to `on_location`, heading samples to
  `on_heading`, and calls `on_frame` once per rendered frame
- The first fix after start anchors the world; every tick re-places all nodes
  against a single anchor snapshot
- `device_position()` reports where the device sits in the anchored frame;
  interpolated nodes get the device's course and speed from each fix
- All tick times are on the feed clock (fix timestamps)
- Periodic one-line summaries for easy tailing

Everything runs on the caller's thread; nothing here blocks.
"""

import copy
import logging
import os
import time
from typing import List, Optional

import yaml

from geoanchor.anchor.world_anchor import WorldAnchor
from geoanchor.base_structures import Fix, GeoPoint, LocalVector
from geoanchor.nodes.tracked_node import TrackedNode

DEFAULT_CONFIG = {
    "anchor": {"align_to_heading": False, "use_altitude": True},
    "nodes": {"device_height_m": 1.5, "interpolate_motion": False},
    "runtime": {"frame_rate_hz": 30},
    "logging": {
        "level": "INFO",
        "filename": None,
        "format": "%(asctime)s %(levelname)s:%(message)s",
        "summary_interval_sec": 1.0,
    },
}


def load_config(cfg_path=None):
    """Read the YAML config (package default if no path) merged over DEFAULT_CONFIG."""
    base_dir = os.path.dirname(os.path.abspath(__file__))
    cfg_file = cfg_path or os.path.join(base_dir, "config.yaml")
    with open(cfg_file, "r") as f:
        loaded = yaml.safe_load(f) or {}
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    for section, values in loaded.items():
        if isinstance(values, dict) and isinstance(cfg.get(section), dict):
            cfg[section].update(values)
        else:
            cfg[section] = values
    return cfg


def setup_logging(cfg):
    """Apply the `logging` config section via logging.basicConfig."""
    log_cfg = cfg.get("logging", {})
    level = getattr(logging, str(log_cfg.get("level", "INFO")).upper(), logging.INFO)
    kwargs = {"level": level, "format": log_cfg.get("format", DEFAULT_CONFIG["logging"]["format"])}
    if log_cfg.get("filename"):
        kwargs["filename"] = log_cfg["filename"]
    logging.basicConfig(**kwargs)


class GeoAnchorPipeline:
    """Owns the world anchor and its tracked nodes; driven by host callbacks."""
    def __init__(self, cfg_path=None, cfg=None, anchor=None):
        """Load configuration and prepare an uninitialised world.

        Parameters
        ----------
        cfg_path : str | None
            YAML config path; the packaged config.yaml when None.
        cfg : dict | None
            Already-loaded config; takes precedence over cfg_path.
        anchor : WorldAnchor | None
            Inject an existing anchor instead of building one from config.
        """
        self.cfg = cfg if cfg is not None else load_config(cfg_path)
        self._validate_config()

        anchor_cfg = self.cfg.get("anchor", {})
        self._anchor_factory = lambda: WorldAnchor(
            align_to_heading=bool(anchor_cfg.get("align_to_heading", False)),
            use_altitude=bool(anchor_cfg.get("use_altitude", True)),
        )
        self.anchor: Optional[WorldAnchor] = anchor
        self.initialised = anchor is not None
        self.nodes: List[TrackedNode] = []

        node_cfg = self.cfg.get("nodes", {})
        self.default_device_height = float(node_cfg.get("device_height_m", 1.5))
        self.default_interpolate = bool(node_cfg.get("interpolate_motion", False))

        self._running = False
        self._current_fix: Optional[Fix] = None

        # Monotonic clock for summaries; fix timestamps come from the feed
        self._mono = time.monotonic
        self._last_summary_time = self._mono()
        self._summary_interval = float(self.cfg.get("logging", {}).get("summary_interval_sec", 1.0))
        self._ticks = 0
        self._skipped = 0

    def _validate_config(self):
        """Warn about missing sections or out-of-range values; never fails."""
        for sec in ("anchor", "nodes", "logging"):
            if sec not in self.cfg:
                logging.warning(f"[CONFIG] Missing section: {sec}")
        try:
            h = float(self.cfg.get("nodes", {}).get("device_height_m", 1.5))
            if h < 0:
                logging.warning(f"[CONFIG] nodes.device_height_m is negative: {h}")
        except (TypeError, ValueError):
            logging.warning("[CONFIG] nodes.device_height_m is not numeric; using 1.5")
            self.cfg.setdefault("nodes", {})["device_height_m"] = 1.5
        try:
            interval = float(self.cfg.get("logging", {}).get("summary_interval_sec", 1.0))
            if interval <= 0:
                logging.info("[CONFIG] logging.summary_interval_sec <= 0; summaries every tick")
        except (TypeError, ValueError):
            logging.warning("[CONFIG] logging.summary_interval_sec is not numeric; using 1.0")
            self.cfg.setdefault("logging", {})["summary_interval_sec"] = 1.0

    # Lifecycle

    @property
    def running(self) -> bool:
        return self._running

    def initialise(self):
        """Set up a fresh, unanchored world. The next fix anchors it."""
        self.anchor = self._anchor_factory()
        self.initialised = True
        logging.info("[PIPELINE] Initialised new world")

    def deinitialise(self):
        """Stop, drop the anchor and forget the current location. Nodes stay registered."""
        self.stop()
        if self.anchor is not None:
            self.anchor.reset()
        self.anchor = None
        self._current_fix = None
        self.initialised = False
        logging.info("[PIPELINE] Deinitialised")

    def start(self):
        """Begin consuming feed samples and placing nodes; initialises first if needed."""
        if not self.initialised:
            self.initialise()
        self._running = True
        logging.info("[PIPELINE] Started")

    def stop(self):
        """Stop consuming feed samples; nodes keep their last transform."""
        if self._running:
            logging.info("[PIPELINE] Stopped")
        self._running = False

    def reanchor(self, fix: Optional[Fix] = None):
        """Move the origin to `fix` (or the latest fix). Already-placed content will jump."""
        fix = fix or self._current_fix
        if self.anchor is None or fix is None:
            return False
        return self.anchor.initialize(fix.point, fix.timestamp, reset=True)

    # World membership

    def create_node(self, location: GeoPoint, bearing=0.0, name=None, **kwargs) -> TrackedNode:
        """Create a node with the configured defaults and add it to the world."""
        kwargs.setdefault("device_height", self.default_device_height)
        kwargs.setdefault("interpolate_motion", self.default_interpolate)
        node = TrackedNode.create(location, bearing=bearing, name=name, **kwargs)
        return self.add_node(node)

    def add_node(self, node: TrackedNode) -> TrackedNode:
        if node not in self.nodes:
            self.nodes.append(node)
        return node

    def remove_node(self, node: TrackedNode):
        if node in self.nodes:
            self.nodes.remove(node)

    # Feed callbacks

    def current_location(self) -> Optional[GeoPoint]:
        """Most recent device location, or None before the first fix."""
        return self._current_fix.point if self._current_fix else None

    def current_fix(self) -> Optional[Fix]:
        return self._current_fix

    def device_position(self) -> Optional[LocalVector]:
        """Where the device sits in the anchor frame, or None before the world is anchored."""
        if self.anchor is None or self._current_fix is None:
            return None
        snap = self.anchor.snapshot()
        if not snap.ready:
            return None
        return snap.project(self._current_fix.point)

    def on_location(self, fix: Fix):
        """Location feed callback: anchors on first fix, then re-places nodes."""
        if not self._running:
            return
        if self._current_fix is not None and fix.timestamp <= self._current_fix.timestamp:
            logging.debug(f"[PIPELINE] Dropping out-of-order fix t={fix.timestamp}")
            return
        self._current_fix = fix
        if not self.anchor.initialized:
            self.anchor.initialize(fix.point, fix.timestamp)
        for node in self.nodes:
            if node.interpolate_motion:
                node.update_motion(fix.timestamp, fix.course, fix.speed)
        self.update_nodes(fix.timestamp)

    def on_heading(self, heading_deg: float):
        """Heading feed callback (degrees from true north)."""
        if not self._running:
            return
        self.anchor.update_heading(heading_deg)

    def on_frame(self, now=None) -> int:
        """Per-frame tick at feed time `now` (defaults to the latest fix time).

        Returns the number of nodes placed.
        """
        if not self._running:
            return 0
        placed = self.update_nodes(now)
        if (self._mono() - self._last_summary_time) >= self._summary_interval:
            self._log_summary()
            self._last_summary_time = self._mono()
        return placed

    def update_nodes(self, now=None) -> int:
        """Place every node against one anchor snapshot; returns how many were placed.

        `now` is on the feed clock; None means the latest fix time (no extrapolation).
        """
        if self.anchor is None:
            return 0
        if now is None and self._current_fix is not None:
            now = self._current_fix.timestamp
        snap = self.anchor.snapshot()
        placed = 0
        for node in list(self.nodes):
            if node.update_placement(snap, now) is not None:
                placed += 1
        self._ticks += 1
        if placed < len(self.nodes):
            self._skipped += 1
        return placed

    def _log_summary(self):
        """Emit a single-line summary with key state for easy tailing."""
        loc = self.current_location()
        snap = self.anchor.snapshot() if self.anchor is not None else None
        device = self.device_position()
        fields = {
            "anchored": bool(snap and snap.ready),
            "nodes": len(self.nodes),
            "ticks": self._ticks,
            "skipped_ticks": self._skipped,
            "lat": round(loc.lat, 7) if loc else None,
            "lon": round(loc.lon, 7) if loc else None,
            "heading": round(snap.heading, 1) if snap and snap.heading is not None else None,
            "device": (f"({device.x:.1f},{device.y:.1f},{device.z:.1f})" if device is not None else None),
        }
        logging.info(", ".join(f"{k}={v}" for k, v in fields.items()))

