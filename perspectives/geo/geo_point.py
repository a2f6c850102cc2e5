"""
Geo-tagged entry data model.

A GeoPoint is one perspective pinned on the globe.  Only ``id``, ``lat``
and ``lng`` matter to clustering and camera logic; everything the views
display (name, timestamps, media references) rides along in ``payload``.

Example
-------
    p = GeoPoint.from_raw("a1", "48.85", 2.35, payload={"name": "Paris"})
    store = GeoPointStore([p])
    len(store)  # 1
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence, Tuple

log = logging.getLogger(__name__)

DEFAULT_COORD = 0.0


def _finite(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def coerce_coordinate(value: Any, default: float = DEFAULT_COORD) -> float:
    """Return *value* as a finite float, or *default* when it is unusable.

    Missing, non-numeric, NaN and infinite values all collapse to the
    default so one bad row cannot break a clustering pass.
    """
    number = _finite(value)
    return default if number is None else number


@dataclass(frozen=True)
class GeoPoint:
    """One geo-tagged entry.

    Coordinates are coerced on construction; a malformed point lands at
    (0, 0) instead of raising.
    """
    id: str
    lat: float
    lng: float
    payload: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        lat, lng = _finite(self.lat), _finite(self.lng)
        if lat is None or lng is None:
            log.debug("Point %s: unusable coordinates (%r, %r), using default",
                      self.id, self.lat, self.lng)
        object.__setattr__(self, "lat", DEFAULT_COORD if lat is None else lat)
        object.__setattr__(self, "lng", DEFAULT_COORD if lng is None else lng)
        # Read-only view so points shared between views stay immutable
        if not isinstance(self.payload, MappingProxyType):
            object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    @classmethod
    def from_raw(
        cls,
        point_id: Any,
        lat: Any,
        lng: Any,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> "GeoPoint":
        return cls(id=str(point_id), lat=lat, lng=lng, payload=payload or {})

    @property
    def coords(self) -> Tuple[float, float]:
        return (self.lat, self.lng)

    @property
    def name(self) -> str:
        return str(self.payload.get("name") or "")


class GeoPointStore(Sequence[GeoPoint]):
    """Immutable, ordered snapshot of the points on the globe.

    A refresh from the data source builds a new store; nothing is edited
    in place, so cached clusterings can key on store identity.
    """

    def __init__(self, points: Iterable[GeoPoint] = ()):
        self._points: Tuple[GeoPoint, ...] = tuple(points)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return GeoPointStore(self._points[index])
        return self._points[index]

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[GeoPoint]:
        return iter(self._points)

    def __repr__(self) -> str:
        return f"GeoPointStore({len(self._points)} points)"

    def find(self, point_id: str) -> Optional[GeoPoint]:
        for p in self._points:
            if p.id == point_id:
                return p
        return None
