"""
Shared camera orientation.

The globe has exactly one piece of mutable state shared between the
renderer and the auto-rotation: where the camera points.  It lives in a
CameraHandle that is passed explicitly to both sides.

Field ownership
───────────────
  lng        written by the motion controller (auto-rotation)
  lat        written by the renderer / user drag
  altitude   written by the renderer / user zoom

Until the renderer attaches a camera the handle is *unmounted*; reads
return None and writes are dropped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CameraOrientation:
    """Point of view: where the camera looks and how far away it is."""
    lat: float = 0.0
    lng: float = 0.0
    altitude: float = 2.5


class CameraHandle:
    """Owned holder for the current CameraOrientation.

    Listeners are called with the new orientation after every write so a
    renderer can apply it to the real camera.
    """

    def __init__(self, orientation: Optional[CameraOrientation] = None):
        self._orientation = orientation
        self._listeners: List[Callable[[CameraOrientation], None]] = []

    @property
    def mounted(self) -> bool:
        return self._orientation is not None

    def mount(self, orientation: Optional[CameraOrientation] = None) -> None:
        """Attach the camera; called by the renderer once it is constructed."""
        self._orientation = orientation or CameraOrientation()
        log.debug("Camera mounted at %s", self._orientation)

    def unmount(self) -> None:
        self._orientation = None
        log.debug("Camera unmounted")

    def add_listener(self, callback: Callable[[CameraOrientation], None]) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[CameraOrientation], None]) -> None:
        try:
            self._listeners.remove(callback)
        except ValueError:
            pass

    def point_of_view(self) -> Optional[CameraOrientation]:
        return self._orientation

    def _write(self, orientation: CameraOrientation) -> None:
        self._orientation = orientation
        for callback in list(self._listeners):
            callback(orientation)

    # ── Motion controller side ───────────────────────────────────────

    def set_longitude(self, lng: float) -> None:
        if self._orientation is None:
            return
        self._write(replace(self._orientation, lng=lng))

    # ── Renderer / user-input side ───────────────────────────────────

    def observe(
        self,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        altitude: Optional[float] = None,
    ) -> None:
        """Record what the user did to the camera (drag, zoom, pan)."""
        if self._orientation is None:
            return
        changes = {}
        if lat is not None:
            changes["lat"] = lat
        if lng is not None:
            changes["lng"] = lng
        if altitude is not None:
            changes["altitude"] = altitude
        if changes:
            self._write(replace(self._orientation, **changes))
