"""
Perspective feed over the Supabase REST (PostgREST) API.

Reads the ``perspectives`` table newest first and turns each row into a
GeoPoint.  Read-only: creating entries belongs to the web app.

Usage
-----
    from perspectives.ingest.supabase_client import fetch_perspectives
    points = fetch_perspectives(url, anon_key)
    for p in points:
        print(p.id, p.lat, p.lng, p.name)
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import requests

from ..errors import FeedNotConfiguredError
from ..geo.geo_point import GeoPoint
from . import fetch_with_retry

log = logging.getLogger(__name__)

TABLE = "perspectives"
COLUMNS = (
    "id", "place_name", "place_lat", "place_lng", "time_of_day", "weather",
    "images", "cover_image", "sketches", "created_at",
)


def row_to_point(row: Dict[str, Any]) -> Optional[GeoPoint]:
    """Map one ``perspectives`` row to a GeoPoint; None if it has no id."""
    point_id = row.get("id")
    if point_id in (None, ""):
        log.debug("Skipping perspective row without id: %r", row)
        return None
    return GeoPoint.from_raw(
        point_id,
        row.get("place_lat"),
        row.get("place_lng"),
        payload={
            "name": row.get("place_name") or "",
            "time": row.get("time_of_day"),
            "weather": row.get("weather"),
            "images": row.get("images") or [],
            "cover_image": row.get("cover_image"),
            "sketches": row.get("sketches") or [],
            "created_at": row.get("created_at"),
        },
    )


def rows_to_points(rows: Iterable[Dict[str, Any]]) -> List[GeoPoint]:
    points: List[GeoPoint] = []
    for row in rows:
        point = row_to_point(row)
        if point is not None:
            points.append(point)
    return points


def fetch_perspectives(
    base_url: Optional[str],
    api_key: Optional[str],
    timeout: float = 15.0,
    session: Optional[requests.Session] = None,
) -> List[GeoPoint]:
    """Fetch all perspectives, newest first.

    Raises
    ------
    FeedNotConfiguredError
        If *base_url* or *api_key* is missing.
    requests.RequestException
        On network failure after retries, or an HTTP 4xx.
    """
    if not base_url or not api_key:
        raise FeedNotConfiguredError(
            "Supabase URL and anon key are required "
            "(PERSPECTIVES_SUPABASE_URL / PERSPECTIVES_SUPABASE_ANON_KEY)"
        )

    url = f"{base_url.rstrip('/')}/rest/v1/{TABLE}"
    resp = fetch_with_retry(
        url,
        params={"select": ",".join(COLUMNS), "order": "created_at.desc"},
        headers={
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        },
        timeout=timeout,
        session=session,
    )
    rows = resp.json() or []
    points = rows_to_points(rows)
    log.info("Supabase feed: %d perspectives (%d rows)", len(points), len(rows))
    return points
