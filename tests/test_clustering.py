"""
Tests for great-circle distance and greedy marker clustering.
"""

import math

import pytest

from conftest import pt
from perspectives.geo.clustering import Cluster, cluster_points
from perspectives.geo.great_circle import EARTH_RADIUS_KM, haversine_km


ONE_DEGREE_KM = EARTH_RADIUS_KM * math.pi / 180


class TestHaversine:
    def test_same_point(self):
        assert haversine_km(40.7, -74.0, 40.7, -74.0) == 0.0

    def test_one_degree_on_equator(self):
        assert haversine_km(0, 0, 0, 1) == pytest.approx(ONE_DEGREE_KM)

    def test_london_to_paris(self):
        assert 340 < haversine_km(51.5074, -0.1278, 48.8566, 2.3522) < 350

    def test_symmetric(self):
        a = haversine_km(35.0, 139.0, -33.9, 151.2)
        b = haversine_km(-33.9, 151.2, 35.0, 139.0)
        assert a == pytest.approx(b)

    def test_across_antimeridian_is_short(self):
        assert haversine_km(0, 179.5, 0, -179.5) == pytest.approx(ONE_DEGREE_KM)


class TestClusterPoints:
    """Greedy first-match clustering."""

    def test_empty(self):
        assert cluster_points([], 200) == []

    def test_reference_scenario(self):
        """(0,0) and (0,1) are ~111 km apart; (0,50) is thousands of km away."""
        a, b, c = pt(0, 0), pt(0, 1), pt(0, 50)
        clusters = cluster_points([a, b, c], 150)

        assert [cl.members for cl in clusters] == [[a, b], [c]]
        assert clusters[0].centroid == pytest.approx((0.0, 0.5))
        assert clusters[1].centroid == (0, 50)

    def test_zero_threshold_gives_singletons_in_order(self):
        points = [pt(0, 0), pt(0, 0.001), pt(10, 10), pt(0, 0)]
        clusters = cluster_points(points, 0)

        assert len(clusters) == len(points)
        assert all(c.is_singleton for c in clusters)
        assert [c.members[0] for c in clusters] == points

    def test_huge_threshold_gives_one_cluster(self):
        points = [pt(51.5, -0.1), pt(-33.9, 151.2), pt(35.7, 139.7), pt(40.7, -74.0)]
        for threshold in (float("inf"), 30000.0):
            clusters = cluster_points(points, threshold)
            assert len(clusters) == 1
            assert clusters[0].members == points

    def test_first_match_not_nearest(self):
        """A point within range of two clusters joins the older one."""
        a = pt(0, 0, "a")
        b = pt(0, 2, "b")           # ~222 km from a → own cluster at 150 km
        between = pt(0, 1.2, "x")   # ~133 km from a, ~89 km from b

        clusters = cluster_points([a, b, between], 150)

        assert [m.id for m in clusters[0].members] == ["a", "x"]
        assert [m.id for m in clusters[1].members] == ["b"]

    def test_threshold_is_strict(self):
        a, b = pt(0, 0), pt(0, 1)
        d = haversine_km(0, 0, 0, 1)
        assert len(cluster_points([a, b], d)) == 2
        assert len(cluster_points([a, b], d + 1e-6)) == 1

    def test_input_order_changes_grouping(self):
        a, b, c = pt(0, 0, "a"), pt(0, 1.2, "b"), pt(0, 2.4, "c")
        forward = cluster_points([a, b, c], 150)
        reordered = cluster_points([b, c, a], 150)

        assert [[m.id for m in cl.members] for cl in forward] == [["a", "b"], ["c"]]
        assert [[m.id for m in cl.members] for cl in reordered] == [["b", "c"], ["a"]]

    def test_deterministic(self):
        points = [pt(48.85 + i * 0.3, 2.35 + (i % 4) * 0.7, f"p{i}") for i in range(40)]

        def snapshot():
            return [
                (c.centroid_lat, c.centroid_lng, [m.id for m in c.members])
                for c in cluster_points(points, 100)
            ]

        assert snapshot() == snapshot()

    def test_running_mean_matches_direct_mean(self):
        points = [pt(10, 20), pt(10.5, 20.5), pt(11, 21), pt(10.2, 20.9)]
        clusters = cluster_points(points, 200)

        assert len(clusters) == 1
        lat_mean = sum(p.lat for p in points) / len(points)
        lng_mean = sum(p.lng for p in points) / len(points)
        assert clusters[0].centroid == pytest.approx((lat_mean, lng_mean))

    def test_centroid_moves_as_points_join(self):
        """Later points are compared against the shifted centroid."""
        a, b = pt(0, 0), pt(0, 1.3)    # ~145 km apart → join at 150
        c = pt(0, 1.9)                 # ~139 km from (0, 0.65), ~211 km from a
        clusters = cluster_points([a, b, c], 150)

        assert len(clusters) == 1
        assert clusters[0].centroid_lng == pytest.approx((0 + 1.3 + 1.9) / 3)

    def test_malformed_point_lands_at_origin(self):
        bad = pt(float("nan"), None, "bad")
        good = pt(0.2, 0.2, "good")
        far = pt(45, 45, "far")

        clusters = cluster_points([far, bad, good], 100)

        assert bad.coords == (0.0, 0.0)
        assert [[m.id for m in c.members] for c in clusters] == [["far"], ["bad", "good"]]

    def test_fresh_clusters_each_pass(self):
        points = [pt(0, 0), pt(0, 0.1)]
        first = cluster_points(points, 50)
        second = cluster_points(points, 50)
        assert first[0] is not second[0]
        assert first[0].members is not second[0].members


class TestCluster:
    def test_seed(self):
        p = pt(12.5, -3.25)
        c = Cluster.seed(p)
        assert c.centroid == (12.5, -3.25)
        assert c.size == 1
        assert c.is_singleton

    def test_absorb_updates_mean(self):
        c = Cluster.seed(pt(0, 0))
        c.absorb(pt(2, 4))
        c.absorb(pt(4, 8))
        assert c.size == 3
        assert c.centroid == pytest.approx((2.0, 4.0))
