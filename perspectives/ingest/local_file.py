"""
Load globe points from a local JSON file.

The file holds a list of objects with ``lat`` and ``lng`` and an ``id``
(or ``slug``); every other key is kept as display payload::

    [{"slug": "kyoto", "name": "Kyoto", "lat": 35.01, "lng": 135.77}]
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Union

from ..geo.geo_point import GeoPoint

log = logging.getLogger(__name__)


def load_points_json(path: Union[str, Path]) -> List[GeoPoint]:
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        records = json.load(f)

    if not isinstance(records, list):
        raise ValueError(f"{path}: expected a JSON list of points")

    points: List[GeoPoint] = []
    for idx, rec in enumerate(records):
        if not isinstance(rec, dict):
            log.warning("%s: entry %d is not an object, skipped", path.name, idx)
            continue
        point_id = rec.get("id") or rec.get("slug") or f"{path.stem}-{idx}"
        payload = {k: v for k, v in rec.items() if k not in ("id", "lat", "lng")}
        points.append(GeoPoint.from_raw(point_id, rec.get("lat"), rec.get("lng"), payload))

    log.info("Loaded %d points from %s", len(points), path)
    return points
