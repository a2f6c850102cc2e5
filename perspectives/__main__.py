"""
Command-line cluster inspector.

Loads points from a JSON file or the Supabase feed and prints the cluster
set the globe would show at each requested altitude.

    python -m perspectives --input data/locations.json --altitude 2.5 1.2 0.3
    python -m perspectives --feed --altitude 1.8
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import requests

from .config import DEFAULT_ALTITUDE, GlobeSettings
from .errors import PerspectivesError
from .geo.geo_point import GeoPointStore
from .geo.zoom_policy import ClusterView
from .logger import setup_logging

log = logging.getLogger("perspectives")


def _load(args: argparse.Namespace) -> GeoPointStore:
    if args.input:
        from .ingest.local_file import load_points_json
        return GeoPointStore(load_points_json(args.input))
    from .ingest.supabase_client import fetch_perspectives
    settings = GlobeSettings.from_env()
    return GeoPointStore(fetch_perspectives(settings.supabase_url, settings.supabase_key))


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="perspectives",
        description="Show how perspectives cluster on the globe at given altitudes.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--input", "-i", help="JSON file with a list of points")
    source.add_argument("--feed", action="store_true",
                        help="Fetch from the Supabase feed (see PERSPECTIVES_SUPABASE_* env)")
    parser.add_argument("--altitude", "-a", type=float, nargs="+",
                        default=[DEFAULT_ALTITUDE],
                        help=f"Camera altitude(s) (default: {DEFAULT_ALTITUDE})")
    parser.add_argument("--verbose", "-v", action="store_true")
    parser.add_argument("--log-file", default=None)
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    try:
        store = _load(args)
    except (PerspectivesError, requests.RequestException, OSError, ValueError) as exc:
        log.error("Could not load points: %s", exc)
        return 1

    view = ClusterView(store)
    for altitude in args.altitude:
        view.set_altitude(altitude)
        clusters = view.clusters()
        print(f"altitude {altitude:.2f}  threshold {view.threshold_km:.0f} km  "
              f"→ {len(clusters)} clusters from {len(store)} points")
        for idx, c in enumerate(clusters):
            names = ", ".join(p.name or p.id for p in c.members)
            print(f"  [{idx:3d}] {c.size:3d} @ ({c.centroid_lat:8.3f}, {c.centroid_lng:8.3f})  {names}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
