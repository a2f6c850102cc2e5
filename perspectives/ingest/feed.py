"""
Periodic perspective feed on the Qt event loop.

Fetches run on a daemon thread; results come back to the GUI thread via a
queued invocation and are emitted as a fresh point list.  The globe view
replaces its store with each list; a failed fetch leaves the current
points on screen.

Usage
-----
    feed = PerspectiveFeed(settings)
    feed.points_updated.connect(globe.set_points)
    feed.start()
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from PyQt5 import QtCore

from ..config import GlobeSettings
from ..geo.geo_point import GeoPoint
from .supabase_client import fetch_perspectives

log = logging.getLogger(__name__)


class PerspectiveFeed(QtCore.QObject):
    """Polls the perspective source and emits point lists.

    Signals
    -------
    points_updated(object)
        ``list[GeoPoint]`` after each successful fetch.
    feed_error(str)
        Human-readable reason a fetch failed.
    """

    points_updated = QtCore.pyqtSignal(object)
    feed_error = QtCore.pyqtSignal(str)

    def __init__(
        self,
        settings: Optional[GlobeSettings] = None,
        fetcher: Optional[Callable[[], List[GeoPoint]]] = None,
        parent: Optional[QtCore.QObject] = None,
    ):
        super().__init__(parent)
        self._settings = settings or GlobeSettings.from_env()
        self._fetcher = fetcher or self._fetch_remote
        self._running = False
        self._stopped = False
        self._in_flight = threading.Lock()

        self._poll_timer = QtCore.QTimer(self)
        self._poll_timer.setInterval(int(self._settings.feed_poll_interval_s * 1000))
        self._poll_timer.timeout.connect(self.refresh)

    def _fetch_remote(self) -> List[GeoPoint]:
        return fetch_perspectives(self._settings.supabase_url, self._settings.supabase_key)

    # ── Control ──────────────────────────────────────────────────────

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._stopped = False
        self.refresh()
        self._poll_timer.start()
        log.info("PerspectiveFeed started (every %ds)", self._poll_timer.interval() // 1000)

    def stop(self) -> None:
        """Stop polling; a fetch still in flight is dropped when it lands."""
        self._running = False
        self._stopped = True
        self._poll_timer.stop()
        log.info("PerspectiveFeed stopped")

    def refresh(self) -> None:
        """Fetch now in the background (e.g. right after a new entry is saved)."""
        if self._stopped:
            return
        if not self._in_flight.acquire(blocking=False):
            log.debug("PerspectiveFeed: fetch already in flight, skipped")
            return
        threading.Thread(
            target=self._run_fetch, daemon=True, name="perspective-feed",
        ).start()

    # ── Background ───────────────────────────────────────────────────

    def _run_fetch(self) -> None:
        try:
            self._fetch()
        finally:
            self._in_flight.release()

    def _fetch(self) -> None:
        try:
            points = self._fetcher()
            QtCore.QMetaObject.invokeMethod(
                self, "_emit_points",
                QtCore.Qt.QueuedConnection,
                QtCore.Q_ARG(object, points),
            )
        except Exception as exc:
            log.error("Perspective feed error: %s", exc)
            QtCore.QMetaObject.invokeMethod(
                self, "_emit_error",
                QtCore.Qt.QueuedConnection,
                QtCore.Q_ARG(str, str(exc)),
            )

    @QtCore.pyqtSlot(object)
    def _emit_points(self, points: list) -> None:
        if self._stopped:
            log.debug("PerspectiveFeed stopped, %d late points dropped", len(points))
            return
        log.info("PerspectiveFeed: %d points", len(points))
        self.points_updated.emit(points)

    @QtCore.pyqtSlot(str)
    def _emit_error(self, message: str) -> None:
        if self._stopped:
            return
        self.feed_error.emit(message)
