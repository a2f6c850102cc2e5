"""
Greedy distance clustering of globe markers.

Points are visited in input order.  Each one joins the FIRST existing
cluster (in creation order) whose centroid lies within the threshold, not
the nearest one, and that cluster's centroid moves to the running mean of
its members.  Points that match nothing start a new cluster.

The centroid is a plain mean of latitude and longitude degrees.  It is
good enough to decide marker grouping but is not a true spherical centre:
it drifts near the poles and breaks across the antimeridian.

Membership has no identity across passes; every call builds new Cluster
objects from scratch.

Usage
-----
    from perspectives.geo.clustering import cluster_points
    clusters = cluster_points(store, threshold_km=200)
    for c in clusters:
        print(c.size, c.centroid_lat, c.centroid_lng)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from .geo_point import GeoPoint
from .great_circle import haversine_km

log = logging.getLogger(__name__)


@dataclass
class Cluster:
    """A transient group of points sharing a running-mean centroid."""
    centroid_lat: float
    centroid_lng: float
    members: List[GeoPoint] = field(default_factory=list)

    @classmethod
    def seed(cls, point: GeoPoint) -> "Cluster":
        return cls(centroid_lat=point.lat, centroid_lng=point.lng, members=[point])

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def is_singleton(self) -> bool:
        return len(self.members) == 1

    @property
    def centroid(self) -> Tuple[float, float]:
        return (self.centroid_lat, self.centroid_lng)

    def distance_km(self, point: GeoPoint) -> float:
        return haversine_km(self.centroid_lat, self.centroid_lng, point.lat, point.lng)

    def absorb(self, point: GeoPoint) -> None:
        """Add *point* and fold it into the running mean."""
        self.members.append(point)
        n = len(self.members)
        self.centroid_lat = (self.centroid_lat * (n - 1) + point.lat) / n
        self.centroid_lng = (self.centroid_lng * (n - 1) + point.lng) / n


def cluster_points(points: Iterable[GeoPoint], threshold_km: float) -> List[Cluster]:
    """Group *points* into clusters whose centroids are within *threshold_km*.

    Parameters
    ----------
    points : iterable of GeoPoint
        Visited in order; the order decides both cluster order and which
        cluster wins near a threshold boundary.
    threshold_km : float
        Strict upper bound on point-to-centroid distance.  Zero (or less)
        disables clustering: every point becomes its own cluster.

    Returns
    -------
    list[Cluster]
        Clusters in creation order, members in absorption order.
    """
    clusters: List[Cluster] = []

    if threshold_km <= 0:
        clusters = [Cluster.seed(p) for p in points]
        log.debug("Clustering disabled: %d singleton clusters", len(clusters))
        return clusters

    n_points = 0
    for point in points:
        n_points += 1
        for cluster in clusters:
            if cluster.distance_km(point) < threshold_km:
                cluster.absorb(point)
                break
        else:
            clusters.append(Cluster.seed(point))

    log.debug("Clustered %d points into %d clusters (threshold %.0f km)",
              n_points, len(clusters), threshold_km)
    return clusters
