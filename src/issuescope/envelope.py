"""Classify a raw GraphQL response body into data or errors.

Partial success is not supported: any non-empty ``errors`` array invalidates
the whole response, and whatever ``data`` accompanied it is dropped.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from .errors import TransportError
from .models import ErrorMessage


@dataclass(frozen=True)
class DataResult:
    payload: Mapping[str, Any]


@dataclass(frozen=True)
class ErrorResult:
    errors: tuple[ErrorMessage, ...]

    @property
    def messages(self) -> list[str]:
        return [e.message for e in self.errors]


FetchResult = Union[DataResult, ErrorResult]


def parse_envelope(raw: Any) -> FetchResult:
    """Return ``ErrorResult`` when ``errors`` is present and non-empty, else ``DataResult``.

    A body that is not a JSON object has no envelope at all and is reported
    as a ``TransportError``.
    """
    if not isinstance(raw, Mapping):
        raise TransportError(f"GraphQL response is not an object: {type(raw).__name__}")
    errors = raw.get("errors")
    if errors:
        entries = errors if isinstance(errors, list) else [errors]
        return ErrorResult(errors=tuple(ErrorMessage.from_payload(e) for e in entries))
    data = raw.get("data")
    return DataResult(payload=data if isinstance(data, Mapping) else {})


__all__ = ["DataResult", "ErrorResult", "FetchResult", "parse_envelope"]
