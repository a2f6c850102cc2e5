"""
Auto-rotation state machine for the globe camera.

The camera spins slowly around the globe until the user touches it, and
picks the spin back up a little while after they let go.

States
──────
  ROTATING ──(pointer-down / touch-start / pointer-enter)──▶ PAUSED
  PAUSED   ──(pointer-up / touch-end)──▶ resume armed, 2000 ms
  PAUSED   ──(pointer-leave)──────────▶ resume armed,  200 ms
  resume armed ──(deadline passes)──▶ ROTATING, spin resyncs to camera lng
  resume armed ──(any start event)──▶ deadline cancelled, PAUSED
  hold() ── PAUSED, interaction ends ignored until release() arms the 200 ms resume

The resume delay is a deadline held here and checked on every tick, not a
free-running callback, so cancelling it is just clearing a number and
nothing can fire once the controller is disposed.

Usage
-----
    camera = CameraHandle()
    motion = CameraMotionController(camera)
    camera.mount()
    motion.tick()                                   # lng += 0.1
    motion.handle(InteractionEvent.POINTER_DOWN)    # paused
    motion.handle(InteractionEvent.POINTER_UP)      # resumes in 2 s
"""
from __future__ import annotations

import enum
import logging
import time
from typing import Callable, Optional

from ..config import (
    RESUME_AFTER_HOVER_MS,
    RESUME_AFTER_RELEASE_MS,
    ROTATION_SPEED_DEG,
)
from ..errors import ControllerDisposedError
from .camera import CameraHandle, CameraOrientation

log = logging.getLogger(__name__)


class InteractionState(enum.Enum):
    ROTATING = "rotating"
    PAUSED = "paused"


class InteractionEvent(enum.Enum):
    POINTER_DOWN = "pointer_down"
    TOUCH_START = "touch_start"
    POINTER_ENTER = "pointer_enter"
    POINTER_UP = "pointer_up"
    TOUCH_END = "touch_end"
    POINTER_LEAVE = "pointer_leave"

    @property
    def is_start(self) -> bool:
        return self in _START_EVENTS


_START_EVENTS = frozenset({
    InteractionEvent.POINTER_DOWN,
    InteractionEvent.TOUCH_START,
    InteractionEvent.POINTER_ENTER,
})


class ResumeTimer:
    """A single re-armable deadline on a monotonic clock (seconds)."""

    def __init__(self) -> None:
        self.deadline: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self.deadline is not None

    def arm(self, now: float, delay_ms: int) -> None:
        self.deadline = now + delay_ms / 1000.0

    def cancel(self) -> None:
        self.deadline = None

    def expired(self, now: float) -> bool:
        return self.deadline is not None and now >= self.deadline


class CameraMotionController:
    """Drives continuous longitude rotation with pause/resume on interaction.

    Parameters
    ----------
    camera : CameraHandle
        Shared orientation.  Only ``lng`` is written; ``lat`` and
        ``altitude`` are re-read each tick so user drags and zooms win.
    speed_deg : float
        Longitude advance per tick.
    resume_after_release_ms, resume_after_hover_ms : int
        Idle delay before rotating again after an explicit release
        (pointer-up, touch-end) or a hover exit (pointer-leave).
    clock : callable
        Monotonic time source in seconds; injectable for tests.
    """

    def __init__(
        self,
        camera: CameraHandle,
        speed_deg: float = ROTATION_SPEED_DEG,
        resume_after_release_ms: int = RESUME_AFTER_RELEASE_MS,
        resume_after_hover_ms: int = RESUME_AFTER_HOVER_MS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._camera = camera
        self._speed = speed_deg
        self._resume_delays = {
            InteractionEvent.POINTER_UP: resume_after_release_ms,
            InteractionEvent.TOUCH_END: resume_after_release_ms,
            InteractionEvent.POINTER_LEAVE: resume_after_hover_ms,
        }
        self._clock = clock
        self._state = InteractionState.ROTATING
        self._timer = ResumeTimer()
        self._rotation = 0.0
        self._synced = False
        self._held = False
        self._disposed = False

    # ── Introspection ────────────────────────────────────────────────

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def is_rotating(self) -> bool:
        return self._state is InteractionState.ROTATING

    @property
    def resume_pending(self) -> bool:
        return self._timer.pending

    @property
    def rotation(self) -> float:
        """Internal longitude accumulator (degrees, 0–360)."""
        return self._rotation

    @property
    def held(self) -> bool:
        return self._held

    @property
    def disposed(self) -> bool:
        return self._disposed

    # ── Events ───────────────────────────────────────────────────────

    def handle(self, event: InteractionEvent) -> None:
        if event.is_start:
            self.interaction_start()
        else:
            self.interaction_end(self._resume_delays[event])

    def interaction_start(self) -> None:
        """Pause now and drop any pending resume."""
        self._check_alive()
        self._timer.cancel()
        if self._state is not InteractionState.PAUSED:
            self._state = InteractionState.PAUSED
            log.debug("Rotation paused")

    def interaction_end(self, delay_ms: int = RESUME_AFTER_RELEASE_MS) -> None:
        """(Re-)arm the resume deadline *delay_ms* from now."""
        self._check_alive()
        if self._held:
            log.debug("Rotation held, interaction end ignored")
            return
        self._timer.arm(self._clock(), delay_ms)
        log.debug("Rotation resume armed in %d ms", delay_ms)

    def hold(self) -> None:
        """Pause until release(); interaction ends in between do not resume."""
        self.interaction_start()
        self._held = True

    def release(self, delay_ms: Optional[int] = None) -> None:
        """Drop the hold and arm the resume (hover-exit delay by default)."""
        self._check_alive()
        self._held = False
        if delay_ms is None:
            delay_ms = self._resume_delays[InteractionEvent.POINTER_LEAVE]
        self.interaction_end(delay_ms)

    # ── Frame ────────────────────────────────────────────────────────

    def tick(self) -> Optional[CameraOrientation]:
        """Advance one animation frame.

        Returns the orientation after the frame, or None while the camera
        is not mounted yet (the caller simply tries again next frame).
        """
        self._check_alive()
        pov = self._camera.point_of_view()
        if pov is None:
            # Pick up from the next camera's lng once one is mounted
            self._synced = False
            return None

        if not self._synced:
            self._rotation = pov.lng % 360
            self._synced = True

        if self._timer.expired(self._clock()):
            self._resume(pov)

        if self._state is InteractionState.ROTATING:
            self._rotation = (self._rotation + self._speed) % 360
            self._camera.set_longitude(self._rotation)

        return self._camera.point_of_view()

    def _resume(self, pov: CameraOrientation) -> None:
        self._timer.cancel()
        self._state = InteractionState.ROTATING
        # Continue from wherever the user left the camera
        self._rotation = pov.lng % 360
        log.debug("Rotation resumed at lng %.2f", self._rotation)

    # ── Teardown ─────────────────────────────────────────────────────

    def dispose(self) -> None:
        if self._disposed:
            return
        self._timer.cancel()
        self._disposed = True
        log.debug("CameraMotionController disposed")

    def _check_alive(self) -> None:
        if self._disposed:
            raise ControllerDisposedError(
                "CameraMotionController used after dispose()"
            )
