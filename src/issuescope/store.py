"""Snapshot store: the single owner of the current snapshot.

Every transition is a pure function of the current snapshot plus one
external value, installed atomically under one lock so fetch merges and
mutation results are applied by a single writer, in completion order.
A small state machine (IDLE -> LOADING -> LOADED) allows at most one fetch
in flight.
"""

from __future__ import annotations

import enum
import threading
from collections.abc import Callable

from .accumulator import accumulate
from .envelope import DataResult, ErrorResult, FetchResult
from .errors import FetchInProgressError, PayloadError, PreconditionViolation
from .logging import get_logger
from .models import ErrorMessage, Snapshot, decode_organization
from .resolver import StarMutationResult, apply_star_mutation

Listener = Callable[[Snapshot], None]


class FetchState(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"


class SnapshotStore:
    def __init__(self, initial: Snapshot | None = None) -> None:
        self._snapshot = initial or Snapshot.empty()
        self._state = FetchState.LOADED if self._snapshot.organization else FetchState.IDLE
        self._lock = threading.RLock()
        self._listeners: list[Listener] = []
        self._ticket = 0
        self.logger = get_logger()

    # ---- read side -----------------------------------------------------
    def get_snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def state(self) -> FetchState:
        return self._state

    @property
    def end_cursor(self) -> str | None:
        with self._lock:
            issues = self._snapshot.issues
            return issues.page_info.end_cursor if issues else None

    @property
    def can_load_more(self) -> bool:
        with self._lock:
            issues = self._snapshot.issues
            return (
                self._state is not FetchState.LOADING
                and issues is not None
                and issues.page_info.has_next_page
            )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for every installed snapshot; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    # ---- fetch slot ----------------------------------------------------
    def begin_fetch(self) -> int:
        """Claim the single fetch slot; returns the ticket ``abort_fetch`` expects."""
        with self._lock:
            return self._claim()

    def begin_continuation(self) -> tuple[int, str]:
        """Claim the slot and read the cursor to continue from, in one step."""
        with self._lock:
            if self._state is FetchState.LOADING:
                raise FetchInProgressError("a fetch is already in progress")
            issues = self._snapshot.issues
            if issues is None or not issues.page_info.has_next_page:
                raise PreconditionViolation("no further page available to load")
            cursor = issues.page_info.end_cursor
            if cursor is None:
                raise PreconditionViolation("current page reports more data but no end cursor")
            return self._claim(), cursor

    def abort_fetch(self, ticket: int) -> None:
        """Release the slot if ``ticket`` still owns it; stale tickets are ignored."""
        with self._lock:
            if self._state is FetchState.LOADING and ticket == self._ticket:
                self._state = self._settled_state(self._snapshot)

    # ---- transitions ---------------------------------------------------
    def on_fetch_result(self, result: FetchResult, cursor: str | None) -> Snapshot:
        with self._lock:
            if isinstance(result, ErrorResult):
                new = Snapshot(organization=None, errors=tuple(result.errors))
            elif isinstance(result, DataResult):
                try:
                    incoming = decode_organization(result.payload)
                except PayloadError as exc:
                    self.logger.warning("discarding malformed organization payload", error=str(exc))
                    new = Snapshot(organization=None, errors=(ErrorMessage(str(exc)),))
                else:
                    new = accumulate(self._snapshot, incoming, cursor)
            else:  # pragma: no cover - guarded by typing
                raise TypeError(f"unsupported fetch result: {result!r}")
            return self._install(new, fetch_done=True)

    def on_transport_failure(self, message: str) -> Snapshot:
        with self._lock:
            new = Snapshot(
                organization=self._snapshot.organization,
                errors=(ErrorMessage(message),),
            )
            return self._install(new, fetch_done=True)

    def on_mutation_result(self, result: StarMutationResult) -> Snapshot:
        with self._lock:
            return self._install(apply_star_mutation(self._snapshot, result), fetch_done=False)

    # ---- internals -----------------------------------------------------
    def _claim(self) -> int:
        if self._state is FetchState.LOADING:
            raise FetchInProgressError("a fetch is already in progress")
        self._state = FetchState.LOADING
        self._ticket += 1
        return self._ticket

    @staticmethod
    def _settled_state(snapshot: Snapshot) -> FetchState:
        return FetchState.LOADED if snapshot.organization is not None else FetchState.IDLE

    def _install(self, new: Snapshot, *, fetch_done: bool) -> Snapshot:
        self._snapshot = new
        if fetch_done:
            self._state = self._settled_state(new)
        for listener in list(self._listeners):
            listener(new)
        return new


__all__ = ["FetchState", "SnapshotStore"]
