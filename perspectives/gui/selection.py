"""
Cluster click handling.

Decides what a click on a globe marker means without doing it: a single
perspective opens its detail page, a group opens the drill-down map.  The
caller carries out the intent.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from ..geo.clustering import Cluster
from ..geo.geo_point import GeoPoint


@dataclass(frozen=True)
class Navigate:
    """Open the detail view of one perspective."""
    point_id: str


@dataclass(frozen=True)
class OpenDrilldown:
    """Open the secondary map with one marker per member."""
    members: Tuple[GeoPoint, ...]


SelectionResult = Union[Navigate, OpenDrilldown]


def on_cluster_activated(cluster: Cluster) -> SelectionResult:
    if cluster.is_singleton:
        return Navigate(cluster.members[0].id)
    return OpenDrilldown(tuple(cluster.members))
