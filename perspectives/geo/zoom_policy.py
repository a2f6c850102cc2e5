"""
Zoom-adaptive clustering threshold.

The camera altitude is quantised into a handful of bands, each with a
fixed clustering distance.  Markers only regroup when the camera crosses
a band edge, so zooming inside a band leaves the marker set stable.

    altitude  > 2.0  → 200 km
    altitude  > 1.5  → 100 km
    altitude  > 1.0  →  50 km
    altitude  > 0.5  →  20 km
    otherwise        →   0 km  (no clustering)

Usage
-----
    view = ClusterView(store, altitude=2.5)
    view.clusters()          # computed on first read
    view.set_altitude(2.2)   # same band → cached clusters kept
    view.set_altitude(1.2)   # new band → recomputed on next read
"""
from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Tuple

from ..config import DEFAULT_ALTITUDE
from .clustering import Cluster, cluster_points
from .geo_point import GeoPoint, GeoPointStore

log = logging.getLogger(__name__)

# (exclusive lower altitude bound, threshold km), highest band first
THRESHOLD_BANDS: Tuple[Tuple[float, float], ...] = (
    (2.0, 200.0),
    (1.5, 100.0),
    (1.0, 50.0),
    (0.5, 20.0),
)
NO_CLUSTERING_KM = 0.0


def threshold_km(altitude: Optional[float]) -> float:
    """Clustering distance for a camera *altitude*.

    Band edges belong to the lower band (strict ``>``), so 2.0 maps to
    100 km.  A missing or NaN altitude is read as the default globe
    altitude.
    """
    if altitude is None or (isinstance(altitude, float) and math.isnan(altitude)):
        altitude = DEFAULT_ALTITUDE
    for lower, km in THRESHOLD_BANDS:
        if altitude > lower:
            return km
    return NO_CLUSTERING_KM


class ClusterView:
    """Lazily clustered view of a point store at the current zoom band.

    The cached cluster list is dropped whenever the store is replaced or
    the threshold band changes, and rebuilt in full on the next read.
    """

    def __init__(self, points: Iterable[GeoPoint] = (), altitude: float = DEFAULT_ALTITUDE):
        self._store = points if isinstance(points, GeoPointStore) else GeoPointStore(points)
        self._altitude = altitude
        self._threshold = threshold_km(altitude)
        self._clusters: Optional[List[Cluster]] = None
        self.recompute_count = 0

    @property
    def store(self) -> GeoPointStore:
        return self._store

    @property
    def altitude(self) -> float:
        return self._altitude

    @property
    def threshold_km(self) -> float:
        return self._threshold

    def set_points(self, points: Iterable[GeoPoint]) -> None:
        """Replace the store wholesale; clusters rebuild on next read."""
        self._store = points if isinstance(points, GeoPointStore) else GeoPointStore(points)
        self._clusters = None
        log.debug("ClusterView: store replaced (%d points)", len(self._store))

    def set_altitude(self, altitude: float) -> bool:
        """Track the camera altitude.  Returns True if the band changed."""
        self._altitude = altitude
        new_threshold = threshold_km(altitude)
        if new_threshold == self._threshold:
            return False
        log.debug("ClusterView: threshold %.0f → %.0f km (altitude %s)",
                  self._threshold, new_threshold, altitude)
        self._threshold = new_threshold
        self._clusters = None
        return True

    def clusters(self) -> List[Cluster]:
        if self._clusters is None:
            self._clusters = cluster_points(self._store, self._threshold)
            self.recompute_count += 1
        return self._clusters
