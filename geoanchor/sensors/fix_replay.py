#!/usr/bin/env python3
"""
Recorded location-feed source for development and demos.

CSV columns: t,kind,lat,lon,alt,course,speed,heading
- kind=fix     : lat/lon required; alt/course/speed optional (blank or negative = unknown)
- kind=heading : heading required (degrees from true north)

Rows are returned in timestamp order. Malformed rows are logged and skipped.
"""

import csv
import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Union

from geoanchor.base_structures import Fix, GeoPoint
from geoanchor.errors import InvalidCoordinate


@dataclass(frozen=True)
class HeadingSample:
    """A device heading sample with its timestamp (seconds)."""
    timestamp: float
    heading: float


FeedSample = Union[Fix, HeadingSample]


def _opt_float(value) -> Optional[float]:
    if value is None or str(value).strip() == "":
        return None
    return float(value)


def _valid_or_none(value: Optional[float]) -> Optional[float]:
    # Location services report invalid course/speed as negative values
    return None if value is None or value < 0 else value


def parse_row(row) -> Optional[FeedSample]:
    """Convert one CSV row (dict) to a feed sample, or None if the kind is unknown."""
    kind = (row.get("kind") or "fix").strip().lower()
    t = float(row["t"])
    if kind == "heading":
        return HeadingSample(timestamp=t, heading=float(row["heading"]))
    if kind == "fix":
        point = GeoPoint(float(row["lat"]), float(row["lon"]), _opt_float(row.get("alt")))
        return Fix(
            point=point,
            timestamp=t,
            course=_valid_or_none(_opt_float(row.get("course"))),
            speed=_valid_or_none(_opt_float(row.get("speed"))),
        )
    return None


def iter_samples(lines) -> Iterator[FeedSample]:
    """Yield feed samples from an iterable of CSV lines, in file order."""
    reader = csv.DictReader(lines)
    for lineno, row in enumerate(reader, start=2):
        try:
            sample = parse_row(row)
        except (KeyError, TypeError, ValueError) as e:
            # InvalidCoordinate is a ValueError
            reason = e.message if isinstance(e, InvalidCoordinate) else repr(e)
            logging.warning(f"[REPLAY] Skipping line {lineno}: {reason}")
            continue
        if sample is None:
            logging.warning(f"[REPLAY] Skipping line {lineno}: unknown kind {row.get('kind')!r}")
            continue
        yield sample


def load_samples(path) -> List[FeedSample]:
    """Read all samples from a CSV recording, sorted by timestamp (stable)."""
    with open(path, "r", newline="") as f:
        samples = list(iter_samples(f))
    samples.sort(key=lambda s: s.timestamp)
    logging.info(f"[REPLAY] Loaded {len(samples)} samples from {path}")
    return samples
