import pytest
from PyQt5 import QtCore

from perspectives.geo.geo_point import GeoPoint


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, now_ms: int = 1_000_000):
        self.now_ms = now_ms

    def __call__(self) -> float:
        return self.now_ms / 1000.0

    def advance_ms(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture(scope="session")
def qapp():
    app = QtCore.QCoreApplication.instance() or QtCore.QCoreApplication([])
    yield app


@pytest.fixture
def clock():
    return FakeClock()


def pt(lat, lng, pid=None, **payload):
    return GeoPoint(id=pid or f"{lat},{lng}", lat=lat, lng=lng, payload=payload)
