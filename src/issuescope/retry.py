"""Centralized retry / backoff helpers for the GraphQL transport.

``run_with_retries`` wraps a thunk performing one HTTP exchange. Only
transient failures are retried: connection errors, timeouts and
``TransientHTTPError`` (5xx gateway errors, rate-limit replies). Everything
else propagates immediately.

Fetches are caller-initiated and one-shot by default (``attempts=1``).

Environment overrides:
  ISSUESCOPE_RETRY_ATTEMPTS (default 1)
  ISSUESCOPE_RETRY_BASE (seconds base, default 0.5)
  ISSUESCOPE_RETRY_MAX_SLEEP (cap in seconds, unset = no cap)
"""

from __future__ import annotations

import os
import random
import re
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

import requests

from .logging import get_logger

T = TypeVar("T")

TRANSIENT_TOKENS = (
    "rate limit",
    "abuse detection",
    "secondary rate",
)
TRANSIENT_STATUSES = frozenset({502, 503, 504})

_RE_RETRY_AFTER = re.compile(r"retry[-\s]after:?\s*(\d+)", re.IGNORECASE)
_RE_SECONDS_HINT = re.compile(r"wait\s*(\d+)\s*seconds", re.IGNORECASE)
_JITTER = random.SystemRandom()


class TransientHTTPError(Exception):
    """An HTTP reply worth retrying; carries the response for the final attempt."""

    def __init__(self, response: requests.Response):
        super().__init__(f"transient HTTP {response.status_code}")
        self.response = response


def _extract_explicit_backoff(text: str) -> float | None:
    """Extract an explicit backoff (seconds) from error output.

    Supports patterns like:
      Retry-After: 12
      retry after 12
      wait 30 seconds
    """
    if not text:
        return None
    m = _RE_RETRY_AFTER.search(text)
    if m:
        val = float(m.group(1))
        return val if val > 0 else None
    m2 = _RE_SECONDS_HINT.search(text)
    if m2:
        val = float(m2.group(1))
        return val if val > 0 else None
    return None


def _env_float(name: str) -> float | None:
    raw = os.environ.get(name)
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


@dataclass
class RetryConfig:
    attempts: int = field(
        default_factory=lambda: int(os.environ.get("ISSUESCOPE_RETRY_ATTEMPTS", "1"))
    )
    base_sleep: float = field(
        default_factory=lambda: float(os.environ.get("ISSUESCOPE_RETRY_BASE", "0.5"))
    )
    max_sleep: float | None = field(
        default_factory=lambda: _env_float("ISSUESCOPE_RETRY_MAX_SLEEP")
    )


def is_transient(output: str) -> bool:
    out_lower = output.lower()
    return any(tok in out_lower for tok in TRANSIENT_TOKENS)


def is_transient_response(response: requests.Response) -> bool:
    if response.status_code in TRANSIENT_STATUSES:
        return True
    return response.status_code in (403, 429) and is_transient(response.text or "")  # noqa: PLR2004


def _hint_text(exc: BaseException) -> str:
    if isinstance(exc, TransientHTTPError):
        retry_after = exc.response.headers.get("Retry-After")
        hint = f"Retry-After: {retry_after}\n" if retry_after else ""
        return hint + (exc.response.text or "")
    return str(exc)


def _compute_sleep(attempt: int, cfg: RetryConfig, out: str) -> float:
    explicit = _extract_explicit_backoff(out)
    backoff = cfg.base_sleep * (2 ** (attempt - 1)) + _JITTER.uniform(0, 0.25)
    sleep_for: float = explicit if explicit is not None else backoff
    if cfg.max_sleep is not None and cfg.max_sleep >= 0:
        sleep_for = min(sleep_for, cfg.max_sleep)
    return sleep_for


def run_with_retries(fn: Callable[[], T], *, cfg: RetryConfig | None = None) -> T:
    """Call ``fn`` until it succeeds, a non-transient error occurs, or attempts run out.

    When the last attempt fails with ``TransientHTTPError`` the response is
    returned as-is (``fn`` must then return a ``requests.Response``) so the
    caller reports the real status.
    """
    cfg = cfg or RetryConfig()
    attempts = max(1, cfg.attempts)
    logger = get_logger()
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except (requests.ConnectionError, requests.Timeout, TransientHTTPError) as exc:
            if attempt >= attempts:
                if isinstance(exc, TransientHTTPError):
                    return exc.response  # type: ignore[return-value]
                raise
            sleep_for = _compute_sleep(attempt, cfg, _hint_text(exc))
            logger.warning(
                f"transient transport error, attempt {attempt}/{attempts}, sleeping {sleep_for:.2f}s",
                error=str(exc),
            )
            time.sleep(sleep_for)
    raise RuntimeError("retry logic exited unexpectedly")  # pragma: no cover


__all__ = [
    "RetryConfig",
    "TransientHTTPError",
    "is_transient",
    "is_transient_response",
    "run_with_retries",
]
