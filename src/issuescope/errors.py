"""Error taxonomy & redaction for IssueScope.

Three disjoint failure kinds reach the snapshot layer:

- ``TransportError``: the request never produced a parseable GraphQL envelope
  (network failure, non-2xx status, non-JSON body). Existing data is kept.
- GraphQL-level errors: carried as data (``ErrorResult``), never raised; they
  wipe the organization tree.
- ``PreconditionViolation``: a contract breach by the caller (continuing a
  pagination with nothing loaded, starring with no repository). Fails loudly.

Public helpers:
- classify_error(exc) -> ErrorInfo
- redact(text) -> str
- join_error_messages(errors) -> str
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

_SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"ghp_[A-Za-z0-9]{20,40}"),  # GitHub classic tokens
    re.compile(r"github_pat_\w{20,}"),  # GitHub fine-grained tokens
    re.compile(r"gho_[A-Za-z0-9]{20,40}"),  # OAuth tokens
    re.compile(r"(?i)(bearer|token)\s+[A-Za-z0-9_\-\.]{20,}"),
]

_REDACTION_PLACEHOLDER = "<redacted>"


class IssueScopeError(RuntimeError):
    """Base class for IssueScope failures."""


class TransportError(IssueScopeError):
    """Raised when the GraphQL endpoint could not be reached or replied without an envelope."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        response_text: str | None = None,
    ):
        super().__init__(redact(message))
        self.status = status
        self.response_text = response_text


class MutationError(IssueScopeError):
    """Raised when a mutation response carries GraphQL errors."""

    def __init__(self, messages: Iterable[str]):
        self.messages = [redact(m) for m in messages]
        super().__init__(" ".join(self.messages) or "mutation failed")


class PreconditionViolation(IssueScopeError):
    """Raised when a caller breaks an ordering contract (programming error)."""


class FetchInProgressError(PreconditionViolation):
    """Raised when a fetch is started while another one is still in flight."""


class PayloadError(IssueScopeError):
    """Raised when a GraphQL data payload does not have the expected shape."""


class InvalidPathError(IssueScopeError, ValueError):
    """Raised when a repository path is not of the form ``owner/repo``."""


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    transient: bool = False
    details: dict[str, Any] | None = None


def redact(text: str) -> str:
    """Redact sensitive tokens in arbitrary text."""
    if not text:
        return text
    redacted = text
    for pat in _SENSITIVE_PATTERNS:
        redacted = pat.sub(_REDACTION_PLACEHOLDER, redacted)
    return redacted


def classify_error(exc: BaseException) -> ErrorInfo:
    """Best-effort classification of an exception.

    - rate limit / abuse wording -> 'github.rate_limit' / 'github.abuse', transient
    - network-y keywords -> 'network', transient
    - TransportError carrying an HTTP status -> 'http' (5xx transient)
    - payload / JSON problems -> 'parse'
    - fallback -> 'generic'
    """
    msg = str(exc) if exc else ""
    low = msg.lower()
    name = exc.__class__.__name__

    if "rate limit" in low or "secondary rate" in low:
        return ErrorInfo("github.rate_limit", redact(msg), name, transient=True)
    if "abuse" in low:
        return ErrorInfo("github.abuse", redact(msg), name, transient=True)
    if any(
        k in low
        for k in ("timeout", "timed out", "connection reset", "connection refused", "temporarily unavailable")
    ):
        return ErrorInfo("network", redact(msg), name, transient=True)
    status = getattr(exc, "status", None)
    if isinstance(status, int):
        return ErrorInfo(
            "http",
            redact(msg),
            name,
            transient=status >= 500,  # noqa: PLR2004
            details={"status": status},
        )
    if isinstance(exc, PayloadError) or any(k in low for k in ("json", "decode", "payload")):
        return ErrorInfo("parse", redact(msg), name)
    return ErrorInfo("generic", redact(msg), name)


def join_error_messages(errors: Iterable[Any]) -> str:
    """Join error entries (objects with ``message`` or plain strings) into one UI string."""
    parts: list[str] = []
    for err in errors:
        message = getattr(err, "message", err)
        parts.append(str(message))
    return " ".join(parts)


__all__ = [
    "ErrorInfo",
    "FetchInProgressError",
    "InvalidPathError",
    "IssueScopeError",
    "MutationError",
    "PayloadError",
    "PreconditionViolation",
    "TransportError",
    "classify_error",
    "join_error_messages",
    "redact",
]
