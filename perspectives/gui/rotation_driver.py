"""
Qt frame loop for the globe auto-rotation.

Runs CameraMotionController on the Qt event loop:

  - waits for the camera to be mounted, polling with a doubling interval
    (100 ms → 1.6 s, bounded number of attempts) instead of spinning;
  - then ticks the controller on a QTimer (~60 fps, ~30 fps on a Pi);
  - translates Qt mouse / touch / hover events from the globe surface
    into InteractionEvents via an event filter.

Signals
-------
orientation_changed(object)
    CameraOrientation after each frame, for the renderer to apply.
state_changed(str)
    "rotating" or "paused" whenever the interaction state flips.
camera_ready()
    Emitted once when the frame loop actually starts.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Optional

from PyQt5 import QtCore

from ..config import (
    FRAME_INTERVAL_MS,
    READY_POLL_INITIAL_MS,
    READY_POLL_MAX_ATTEMPTS,
    READY_POLL_MAX_MS,
    GlobeSettings,
)
from ..errors import ControllerDisposedError
from .camera import CameraHandle
from .motion import CameraMotionController, InteractionEvent

log = logging.getLogger(__name__)

_QT_EVENT_MAP: Dict[int, InteractionEvent] = {
    QtCore.QEvent.MouseButtonPress: InteractionEvent.POINTER_DOWN,
    QtCore.QEvent.TouchBegin: InteractionEvent.TOUCH_START,
    QtCore.QEvent.Enter: InteractionEvent.POINTER_ENTER,
    QtCore.QEvent.MouseButtonRelease: InteractionEvent.POINTER_UP,
    QtCore.QEvent.TouchEnd: InteractionEvent.TOUCH_END,
    QtCore.QEvent.Leave: InteractionEvent.POINTER_LEAVE,
}


class RotationDriver(QtCore.QObject):
    """Owns the frame timer and readiness polling for one globe view."""

    orientation_changed = QtCore.pyqtSignal(object)  # CameraOrientation
    state_changed = QtCore.pyqtSignal(str)
    camera_ready = QtCore.pyqtSignal()

    def __init__(
        self,
        camera: CameraHandle,
        settings: Optional[GlobeSettings] = None,
        clock: Callable[[], float] = time.monotonic,
        parent: Optional[QtCore.QObject] = None,
    ):
        super().__init__(parent)
        settings = settings or GlobeSettings()
        self._camera = camera
        self._motion = CameraMotionController(
            camera,
            speed_deg=settings.rotation_speed_deg,
            resume_after_release_ms=settings.resume_after_release_ms,
            resume_after_hover_ms=settings.resume_after_hover_ms,
            clock=clock,
        )
        self._kiosk = settings.kiosk
        self._running = False
        self._last_state = self._motion.state
        self._watched: List[QtCore.QObject] = []

        # Animation frames
        self._frame_timer = QtCore.QTimer(self)
        self._frame_timer.setInterval(settings.frame_interval_ms or FRAME_INTERVAL_MS)
        self._frame_timer.timeout.connect(self._on_frame)

        # Camera readiness polling
        self._ready_timer = QtCore.QTimer(self)
        self._ready_timer.setSingleShot(True)
        self._ready_timer.timeout.connect(self._poll_ready)
        self._ready_attempts = 0
        self._ready_interval_ms = READY_POLL_INITIAL_MS

    # ── Introspection ────────────────────────────────────────────────

    @property
    def motion(self) -> CameraMotionController:
        return self._motion

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_animating(self) -> bool:
        return self._frame_timer.isActive()

    @property
    def is_waiting_for_camera(self) -> bool:
        return self._ready_timer.isActive()

    # ── Control ──────────────────────────────────────────────────────

    def start(self) -> None:
        """Begin rotating, or start polling for the camera if not mounted.

        A stopped driver is finished; build a new one for the next mount.
        """
        if self._running:
            return
        if self._motion.disposed:
            raise ControllerDisposedError("RotationDriver cannot restart after stop()")
        self._running = True
        if self._camera.mounted:
            self._start_frames()
            return
        self._ready_attempts = 0
        self._ready_interval_ms = READY_POLL_INITIAL_MS
        self._ready_timer.start(self._ready_interval_ms)
        log.info("RotationDriver waiting for camera (poll every %d ms)",
                 self._ready_interval_ms)

    def stop(self) -> None:
        """Stop the frame loop and any pending readiness poll; tear down motion."""
        self._running = False
        self._frame_timer.stop()
        self._ready_timer.stop()
        for obj in list(self._watched):
            self.detach(obj)
        self._motion.dispose()
        log.info("RotationDriver stopped")

    def _start_frames(self) -> None:
        self._ready_timer.stop()
        self._frame_timer.start()
        self.camera_ready.emit()
        log.info("RotationDriver animating (%d ms/frame)", self._frame_timer.interval())

    def _poll_ready(self) -> None:
        if not self._running or self._frame_timer.isActive():
            return
        self._ready_attempts += 1
        if self._camera.mounted:
            log.debug("Camera ready after %d polls", self._ready_attempts)
            self._start_frames()
            return
        if self._ready_attempts >= READY_POLL_MAX_ATTEMPTS:
            log.warning("Camera not mounted after %d polls, auto-rotation disabled",
                        self._ready_attempts)
            self._ready_timer.stop()
            self._running = False
            return
        self._ready_interval_ms = min(self._ready_interval_ms * 2, READY_POLL_MAX_MS)
        self._ready_timer.start(self._ready_interval_ms)

    def _on_frame(self) -> None:
        orientation = self._motion.tick()
        self._report_state()
        if orientation is not None:
            self.orientation_changed.emit(orientation)

    def _report_state(self) -> None:
        state = self._motion.state
        if state is not self._last_state:
            self._last_state = state
            self.state_changed.emit(state.value)

    # ── Interaction input ────────────────────────────────────────────

    def handle_event(self, event: InteractionEvent) -> None:
        """Feed an interaction directly (for surfaces that are not QObjects)."""
        self._motion.handle(event)
        self._report_state()

    def hold(self) -> None:
        """Keep rotation paused until release(), whatever the surface reports."""
        self._motion.hold()
        self._report_state()

    def release(self) -> None:
        """End a hold; rotation resumes after the hover-exit delay."""
        self._motion.release()
        self._report_state()

    def attach(self, surface: QtCore.QObject) -> None:
        """Watch *surface* for mouse, touch and hover events."""
        if surface in self._watched:
            return
        surface.installEventFilter(self)
        self._watched.append(surface)

    def detach(self, surface: QtCore.QObject) -> None:
        if surface in self._watched:
            surface.removeEventFilter(self)
            self._watched.remove(surface)

    def eventFilter(self, obj: QtCore.QObject, event: QtCore.QEvent) -> bool:
        interaction = _QT_EVENT_MAP.get(event.type())
        if interaction is not None and not self._motion.disposed:
            self.handle_event(interaction)
        if self._kiosk and event.type() == QtCore.QEvent.Wheel:
            # Kiosk: the altitude is fixed, eat wheel zoom
            return True
        # The surface still needs its own mouse handling
        return False
