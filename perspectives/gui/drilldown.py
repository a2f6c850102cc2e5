"""
Drill-down map view model.

When a multi-member cluster is clicked the globe hands its members to a
flat secondary map.  That map shows one pin per member (no further
clustering), starts centred on the members' mean position and then flies
to their bounding box.

Usage
-----
    view = DrilldownView.from_members(result.members)
    view.title          # "3 locations in this cluster"
    view.bounds         # (south, west, north, east)
    view.activate(view.pins[0])  # Navigate(...)

The renderer waits FLY_DELAY_MS after opening, then fits ``bounds`` with
FIT_PADDING_PX of padding over FLY_DURATION_S.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence, Tuple

import numpy as np

from ..geo.geo_point import GeoPoint
from .selection import Navigate

log = logging.getLogger(__name__)

WORLD_CENTER: Tuple[float, float] = (20.0, 0.0)
FIT_PADDING_PX = 60
FLY_DURATION_S = 1.5
FLY_DELAY_MS = 300

# Postgres trims trailing zeros; fromisoformat before 3.11 wants 3 or 6 digits
_FRACTION = re.compile(r"\.(\d+)")


def format_date(value: Any) -> Optional[str]:
    """Render an ISO timestamp as e.g. ``Oct 19, 2026``; None if unusable."""
    if not value:
        return None
    if isinstance(value, datetime):
        d = value
    else:
        try:
            text = str(value).strip().replace("Z", "+00:00")
            text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
            d = datetime.fromisoformat(text)
        except ValueError:
            log.debug("Unparseable date %r", value)
            return None
    return f"{d:%b} {d.day}, {d.year}"


def preview_image(payload) -> Optional[str]:
    """First sketch, else first photo, else the cover image."""
    for key in ("sketches", "images"):
        media = payload.get(key) or []
        if media:
            return media[0]
    return payload.get("cover_image") or None


@dataclass(frozen=True)
class PinSummary:
    """What the drill-down shows for one member on hover."""
    id: str
    name: str
    lat: float
    lng: float
    date: Optional[str] = None
    time_of_day: Optional[str] = None
    weather: Optional[str] = None
    preview: Optional[str] = None

    @classmethod
    def from_point(cls, point: GeoPoint) -> "PinSummary":
        p = point.payload
        return cls(
            id=point.id,
            name=point.name,
            lat=point.lat,
            lng=point.lng,
            date=format_date(p.get("created_at")),
            time_of_day=p.get("time") or None,
            weather=p.get("weather") or None,
            preview=preview_image(p),
        )


@dataclass(frozen=True)
class DrilldownView:
    pins: Tuple[PinSummary, ...]
    center: Tuple[float, float]
    bounds: Optional[Tuple[float, float, float, float]]  # south, west, north, east

    @classmethod
    def from_members(cls, members: Sequence[GeoPoint]) -> "DrilldownView":
        if not members:
            return cls(pins=(), center=WORLD_CENTER, bounds=None)

        coords = np.array([p.coords for p in members], dtype=float)
        lat_c, lng_c = coords.mean(axis=0)
        south, west = coords.min(axis=0)
        north, east = coords.max(axis=0)
        return cls(
            pins=tuple(PinSummary.from_point(p) for p in members),
            center=(float(lat_c), float(lng_c)),
            bounds=(float(south), float(west), float(north), float(east)),
        )

    @property
    def title(self) -> str:
        n = len(self.pins)
        return f"{n} location{'' if n == 1 else 's'} in this cluster"

    def activate(self, pin: PinSummary) -> Navigate:
        return Navigate(pin.id)
