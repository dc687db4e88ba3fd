"""Merge one fetched page of issues into the current snapshot.

The server cursor guarantees forward-only, non-overlapping pages, so a
continuation simply appends the incoming edges after the ones already held.
No deduplication happens; a repeated node from the server is kept twice.
"""

from __future__ import annotations

from dataclasses import replace

from .errors import PreconditionViolation
from .models import Organization, Snapshot


def accumulate(current: Snapshot, incoming: Organization, cursor: str | None) -> Snapshot:
    """Produce the snapshot that results from receiving ``incoming``.

    Without a cursor this is an initial fetch and ``incoming`` replaces
    everything. With a cursor, ``incoming`` wins for every field except the
    issue edges, which become ``current`` edges followed by ``incoming`` edges;
    ``pageInfo`` and ``totalCount`` always come from ``incoming``. Errors are
    cleared in both cases.
    """
    if cursor is None:
        return Snapshot(organization=incoming, errors=())

    if current.organization is None:
        raise PreconditionViolation(
            "continuation fetch received without a previously loaded organization"
        )

    previous_edges = current.organization.repository.issues.edges
    incoming_repo = incoming.repository
    merged_issues = replace(
        incoming_repo.issues, edges=previous_edges + incoming_repo.issues.edges
    )
    merged = replace(incoming, repository=replace(incoming_repo, issues=merged_issues))
    return Snapshot(organization=merged, errors=())


__all__ = ["accumulate"]
