"""
Globe view model — ties the clustering and the camera together.

The renderer (whatever draws the globe) talks to one GlobeViewModel:

  renderer zoom  → set_altitude()  → new threshold band → clusters_changed
  data refresh   → set_points()    → clusters_changed
  marker click   → activate()      → navigate_requested / drilldown_requested
  every frame    ← orientation_changed (from the rotation driver)

Rotation is held paused while a drill-down is open and picks up again
shortly after it closes.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from PyQt5 import QtCore

from ..config import GlobeSettings
from ..geo.clustering import Cluster
from ..geo.geo_point import GeoPoint
from ..geo.zoom_policy import ClusterView
from .camera import CameraHandle, CameraOrientation
from .drilldown import DrilldownView, PinSummary
from .rotation_driver import RotationDriver
from .selection import Navigate, OpenDrilldown, SelectionResult, on_cluster_activated

log = logging.getLogger(__name__)


class GlobeViewModel(QtCore.QObject):
    """Signals
    -------
    clusters_changed(object)
        ``list[Cluster]`` whenever the displayed cluster set is rebuilt.
    navigate_requested(str)
        Perspective id to open.
    drilldown_requested(object)
        DrilldownView for a multi-member cluster.
    drilldown_closed()
    orientation_changed(object)
        CameraOrientation per frame.
    """

    clusters_changed = QtCore.pyqtSignal(object)
    navigate_requested = QtCore.pyqtSignal(str)
    drilldown_requested = QtCore.pyqtSignal(object)
    drilldown_closed = QtCore.pyqtSignal()
    orientation_changed = QtCore.pyqtSignal(object)

    def __init__(
        self,
        points: Iterable[GeoPoint] = (),
        settings: Optional[GlobeSettings] = None,
        camera: Optional[CameraHandle] = None,
        driver: Optional[RotationDriver] = None,
        parent: Optional[QtCore.QObject] = None,
    ):
        super().__init__(parent)
        self._settings = settings or GlobeSettings()
        self._camera = camera or CameraHandle()
        self._view = ClusterView(points, altitude=self._settings.default_altitude)
        self._driver = driver or RotationDriver(self._camera, self._settings, parent=self)
        self._driver.orientation_changed.connect(self._on_orientation)
        self._drilldown: Optional[DrilldownView] = None

    # ── Accessors ────────────────────────────────────────────────────

    @property
    def camera(self) -> CameraHandle:
        return self._camera

    @property
    def driver(self) -> RotationDriver:
        return self._driver

    @property
    def threshold_km(self) -> float:
        return self._view.threshold_km

    @property
    def drilldown(self) -> Optional[DrilldownView]:
        return self._drilldown

    def clusters(self) -> List[Cluster]:
        return self._view.clusters()

    # ── Inputs ───────────────────────────────────────────────────────

    def set_points(self, points: Iterable[GeoPoint]) -> None:
        self._view.set_points(points)
        self.clusters_changed.emit(self._view.clusters())

    def set_altitude(self, altitude: float) -> None:
        """Renderer reports a zoom; recluster only on a band change."""
        self._camera.observe(altitude=altitude)
        if self._view.set_altitude(altitude):
            log.info("Zoom band changed: altitude %s → %.0f km threshold",
                     altitude, self._view.threshold_km)
            self.clusters_changed.emit(self._view.clusters())

    def mount_camera(self, orientation: Optional[CameraOrientation] = None) -> None:
        self._camera.mount(orientation)
        if orientation is not None:
            self.set_altitude(orientation.altitude)

    def start(self) -> None:
        self._driver.start()

    def shutdown(self) -> None:
        self._driver.stop()
        self._camera.unmount()

    # ── Selection ────────────────────────────────────────────────────

    def activate(self, cluster: Cluster) -> SelectionResult:
        result = on_cluster_activated(cluster)
        if isinstance(result, Navigate):
            self.navigate_requested.emit(result.point_id)
        elif isinstance(result, OpenDrilldown):
            self._open_drilldown(result)
        return result

    def activate_pin(self, pin: PinSummary) -> Navigate:
        """A pin in the drill-down was clicked: close it and navigate."""
        result = self._drilldown.activate(pin) if self._drilldown else Navigate(pin.id)
        self.close_drilldown()
        self.navigate_requested.emit(result.point_id)
        return result

    def _open_drilldown(self, result: OpenDrilldown) -> None:
        self._drilldown = DrilldownView.from_members(result.members)
        if not self._driver.motion.disposed:
            self._driver.hold()
        log.info("Drill-down opened: %s", self._drilldown.title)
        self.drilldown_requested.emit(self._drilldown)

    def close_drilldown(self) -> None:
        if self._drilldown is None:
            return
        self._drilldown = None
        if not self._driver.motion.disposed:
            self._driver.release()
        self.drilldown_closed.emit()

    def _on_orientation(self, orientation: CameraOrientation) -> None:
        self.orientation_changed.emit(orientation)
