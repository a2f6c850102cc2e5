"""Point feed clients: where the globe's perspectives come from."""
from __future__ import annotations

import logging
import time
from typing import Mapping, Optional

import requests

log = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 15  # seconds


def fetch_with_retry(
    url: str,
    *,
    params: Optional[Mapping[str, str]] = None,
    headers: Optional[Mapping[str, str]] = None,
    timeout: float = _DEFAULT_TIMEOUT,
    retries: int = 2,
    backoff: float = 2.0,
    session: Optional[requests.Session] = None,
) -> requests.Response:
    """GET *url*, retrying connection errors, timeouts and 5xx responses.

    4xx responses raise ``requests.HTTPError`` immediately.
    """
    http = session or requests
    last_exc: Optional[Exception] = None
    for attempt in range(1, retries + 2):
        try:
            resp = http.get(url, params=params, headers=headers, timeout=timeout)
            if resp.status_code < 500:
                resp.raise_for_status()
                return resp
            log.warning("HTTP %d from %s (attempt %d/%d)",
                        resp.status_code, url[:80], attempt, retries + 1)
            last_exc = requests.HTTPError(
                f"HTTP {resp.status_code} from {url[:80]}", response=resp,
            )
        except (requests.ConnectionError, requests.Timeout) as exc:
            last_exc = exc
            log.warning("Network error on %s (attempt %d/%d): %s",
                        url[:80], attempt, retries + 1, exc)

        if attempt <= retries:
            time.sleep(backoff * attempt)

    raise last_exc or requests.ConnectionError(f"Failed after {retries + 1} attempts")
