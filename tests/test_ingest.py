"""
Tests for the perspective feed clients.
"""

import json

import pytest
import requests

from conftest import pt
from perspectives.config import GlobeSettings
from perspectives.errors import FeedNotConfiguredError
from perspectives.ingest import fetch_with_retry
from perspectives.ingest.feed import PerspectiveFeed
from perspectives.ingest.local_file import load_points_json
from perspectives.ingest.supabase_client import fetch_perspectives, row_to_point, rows_to_points


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload

    def raise_for_status(self):
        if 400 <= self.status_code:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)


class FakeSession:
    """Replays queued responses / exceptions and records each call."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


ROWS = [
    {
        "id": "p-2", "place_name": "Lisbon", "place_lat": 38.72, "place_lng": -9.14,
        "time_of_day": "evening", "weather": "windy", "images": None,
        "cover_image": "cover.jpg", "sketches": ["s1.png"], "created_at": "2026-02-01T12:00:00Z",
    },
    {"id": None, "place_name": "ghost", "place_lat": 1, "place_lng": 1},
    {"id": "p-1", "place_name": "Nowhere", "place_lat": None, "place_lng": "abc"},
]


class TestFetchWithRetry:
    def test_success(self):
        session = FakeSession(FakeResponse(200, []))
        resp = fetch_with_retry("http://x", session=session, backoff=0)
        assert resp.status_code == 200
        assert len(session.calls) == 1

    def test_retries_server_errors(self):
        session = FakeSession(FakeResponse(503), FakeResponse(502), FakeResponse(200, [1]))
        resp = fetch_with_retry("http://x", session=session, retries=2, backoff=0)
        assert resp.json() == [1]
        assert len(session.calls) == 3

    def test_retries_connection_errors(self):
        session = FakeSession(requests.ConnectionError("down"), FakeResponse(200, []))
        fetch_with_retry("http://x", session=session, backoff=0)
        assert len(session.calls) == 2

    def test_client_error_raises_immediately(self):
        session = FakeSession(FakeResponse(401), FakeResponse(200, []))
        with pytest.raises(requests.HTTPError):
            fetch_with_retry("http://x", session=session, backoff=0)
        assert len(session.calls) == 1

    def test_gives_up(self):
        session = FakeSession(*(requests.Timeout("slow") for _ in range(3)))
        with pytest.raises(requests.Timeout):
            fetch_with_retry("http://x", session=session, retries=2, backoff=0)
        assert len(session.calls) == 3

    def test_persistent_server_error_raises_http_error(self):
        session = FakeSession(FakeResponse(500), FakeResponse(500))
        with pytest.raises(requests.HTTPError):
            fetch_with_retry("http://x", session=session, retries=1, backoff=0)


class TestRowMapping:
    def test_full_row(self):
        p = row_to_point(ROWS[0])
        assert p.id == "p-2"
        assert p.coords == (38.72, -9.14)
        assert p.name == "Lisbon"
        assert p.payload["time"] == "evening"
        assert p.payload["weather"] == "windy"
        assert p.payload["images"] == []
        assert p.payload["sketches"] == ["s1.png"]
        assert p.payload["cover_image"] == "cover.jpg"

    def test_rows_without_id_skipped(self):
        points = rows_to_points(ROWS)
        assert [p.id for p in points] == ["p-2", "p-1"]

    def test_bad_coordinates_default(self):
        assert row_to_point(ROWS[2]).coords == (0.0, 0.0)


class TestFetchPerspectives:
    def test_request_shape(self):
        session = FakeSession(FakeResponse(200, ROWS))
        points = fetch_perspectives("https://demo.supabase.co/", "anon", session=session)

        call = session.calls[0]
        assert call["url"] == "https://demo.supabase.co/rest/v1/perspectives"
        assert call["params"]["order"] == "created_at.desc"
        assert "place_lat" in call["params"]["select"].split(",")
        assert call["headers"]["apikey"] == "anon"
        assert call["headers"]["Authorization"] == "Bearer anon"
        assert [p.id for p in points] == ["p-2", "p-1"]

    @pytest.mark.parametrize("url, key", [(None, "k"), ("https://x", None), ("", "")])
    def test_not_configured(self, url, key):
        with pytest.raises(FeedNotConfiguredError):
            fetch_perspectives(url, key)


class TestLoadPointsJson:
    def test_load(self, tmp_path):
        path = tmp_path / "locations.json"
        path.write_text(json.dumps([
            {"slug": "kyoto", "name": "Kyoto", "lat": 35.01, "lng": 135.77},
            {"id": 7, "lat": "1.5", "lng": 2},
            {"name": "unnamed", "lat": 3, "lng": 4},
            "junk",
        ]), encoding="utf-8")

        points = load_points_json(path)

        assert [p.id for p in points] == ["kyoto", "7", "locations-2"]
        assert points[0].name == "Kyoto"
        assert points[0].payload["slug"] == "kyoto"
        assert points[1].coords == (1.5, 2.0)

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"lat": 1}', encoding="utf-8")
        with pytest.raises(ValueError):
            load_points_json(path)


class TestPerspectiveFeed:
    def test_emits_points_on_gui_thread(self, qapp):
        points = [pt(1, 2, "a")]
        feed = PerspectiveFeed(GlobeSettings(), fetcher=lambda: points)
        received = []
        feed.points_updated.connect(received.append)

        feed._fetch()
        qapp.processEvents()

        assert received == [points]

    def test_error_signal(self, qapp):
        def boom():
            raise requests.ConnectionError("offline")

        feed = PerspectiveFeed(GlobeSettings(), fetcher=boom)
        errors, received = [], []
        feed.feed_error.connect(errors.append)
        feed.points_updated.connect(received.append)

        feed._fetch()
        qapp.processEvents()

        assert errors == ["offline"]
        assert received == []

    def test_unconfigured_remote_reports_error(self, qapp):
        feed = PerspectiveFeed(GlobeSettings())
        errors = []
        feed.feed_error.connect(errors.append)

        feed._fetch()
        qapp.processEvents()

        assert len(errors) == 1
        assert "PERSPECTIVES_SUPABASE_URL" in errors[0]

    def test_start_stop(self, qapp):
        feed = PerspectiveFeed(GlobeSettings(feed_poll_interval_s=60), fetcher=lambda: [])
        feed.start()
        assert feed._in_flight.acquire(timeout=5)
        feed._in_flight.release()
        qapp.processEvents()
        assert feed._poll_timer.isActive()
        assert feed._poll_timer.interval() == 60_000
        feed.stop()
        assert not feed._poll_timer.isActive()

    def test_late_result_after_stop_is_dropped(self, qapp):
        feed = PerspectiveFeed(GlobeSettings(), fetcher=lambda: [pt(1, 2, "a")])
        received, errors = [], []
        feed.points_updated.connect(received.append)
        feed.feed_error.connect(errors.append)

        feed._fetch()
        feed.stop()
        qapp.processEvents()

        assert received == []
        assert errors == []
