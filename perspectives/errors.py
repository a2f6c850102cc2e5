"""Exception types raised by the globe core."""
from __future__ import annotations


class PerspectivesError(Exception):
    """Base class for all errors raised by this package."""


class ControllerDisposedError(PerspectivesError, RuntimeError):
    """A motion controller was used after teardown.

    Timers and the frame loop are cancelled on dispose, so reaching this
    means something kept a stale reference alive.
    """


class FeedNotConfiguredError(PerspectivesError):
    """The perspective feed has no URL or API key."""
