"""
Runtime configuration.

Settings come from the environment so the same build runs on a desktop,
on a Pi kiosk and in tests without code changes.

Environment
-----------
    PERSPECTIVES_SUPABASE_URL        feed base URL (falls back to NEXT_PUBLIC_SUPABASE_URL)
    PERSPECTIVES_SUPABASE_ANON_KEY   feed API key (falls back to NEXT_PUBLIC_SUPABASE_ANON_KEY)
    PERSPECTIVES_KIOSK               any non-empty value enables kiosk mode
"""
from __future__ import annotations

import logging
import os
import platform
from dataclasses import dataclass
from typing import Mapping, Optional

log = logging.getLogger(__name__)

IS_PI = (
    platform.system() == "Linux"
    and platform.machine().startswith(("aarch64", "arm"))
)

# ── Camera motion ─────────────────────────────────────────────────────
ROTATION_SPEED_DEG = 0.1        # longitude advance per frame
RESUME_AFTER_RELEASE_MS = 2000  # pointer-up / touch-end
RESUME_AFTER_HOVER_MS = 200     # pointer-leave
DEFAULT_ALTITUDE = 2.5
FRAME_INTERVAL_MS = 33 if IS_PI else 16

# ── Camera readiness polling ──────────────────────────────────────────
READY_POLL_INITIAL_MS = 100
READY_POLL_MAX_MS = 1600
READY_POLL_MAX_ATTEMPTS = 20

# ── Feed ──────────────────────────────────────────────────────────────
FEED_POLL_INTERVAL_S = 300.0


def _env(env: Mapping[str, str], *names: str) -> Optional[str]:
    for name in names:
        value = env.get(name, "").strip()
        if value:
            return value
    return None


@dataclass(frozen=True)
class GlobeSettings:
    """Tunables for one globe view."""
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    kiosk: bool = False
    rotation_speed_deg: float = ROTATION_SPEED_DEG
    resume_after_release_ms: int = RESUME_AFTER_RELEASE_MS
    resume_after_hover_ms: int = RESUME_AFTER_HOVER_MS
    default_altitude: float = DEFAULT_ALTITUDE
    frame_interval_ms: int = FRAME_INTERVAL_MS
    feed_poll_interval_s: float = FEED_POLL_INTERVAL_S

    @property
    def feed_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "GlobeSettings":
        env = os.environ if env is None else env
        settings = cls(
            supabase_url=_env(env, "PERSPECTIVES_SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
            supabase_key=_env(env, "PERSPECTIVES_SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY"),
            kiosk=IS_PI or bool(_env(env, "PERSPECTIVES_KIOSK")),
        )
        if not settings.feed_configured:
            log.debug("Perspective feed not configured (set PERSPECTIVES_SUPABASE_URL "
                      "and PERSPECTIVES_SUPABASE_ANON_KEY)")
        return settings
