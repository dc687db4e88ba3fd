"""Fetch and mutation entrypoints wiring the transport to the snapshot store.

Fetch flow::

    begin_fetch (or begin_continuation) -> transport.execute -> parse_envelope
        DataResult   -> store.on_fetch_result (accumulate)
        ErrorResult  -> store.on_fetch_result (organization wiped)
        TransportError -> store.on_transport_failure (organization kept)

Mutation flow: transport.execute -> parse_envelope -> resolver via
``store.on_mutation_result``. Mutation failures raise and leave the snapshot
untouched.
"""

from __future__ import annotations

from typing import Any

from .config import BrowserConfig
from .envelope import ErrorResult, parse_envelope
from .errors import (
    InvalidPathError,
    MutationError,
    PreconditionViolation,
    TransportError,
    classify_error,
)
from .github_graphql import GitHubGraphQLClient, GraphQLTransport
from .logging import get_logger
from .models import Snapshot
from .queries import ADD_STAR, GET_ISSUES_OF_REPOSITORY, REMOVE_STAR
from .resolver import StarMutationResult
from .retry import RetryConfig
from .store import SnapshotStore


def split_path(path: str) -> tuple[str, str]:
    """Split ``owner/repo`` into organization login and repository name."""
    owner, sep, name = path.strip().strip("/").partition("/")
    if not sep or not owner or not name or "/" in name:
        raise InvalidPathError(f"expected 'owner/repo', got {path!r}")
    return owner, name


class IssueBrowser:
    """Drives fetches and star mutations for one repository path at a time."""

    def __init__(
        self,
        transport: GraphQLTransport,
        *,
        store: SnapshotStore | None = None,
        issues_page_size: int = 5,
        reactions_last: int = 3,
    ) -> None:
        self.transport = transport
        self.store = store or SnapshotStore()
        self.issues_page_size = issues_page_size
        self.reactions_last = reactions_last
        self.path: str | None = None
        self.logger = get_logger()

    @classmethod
    def from_config(cls, cfg: BrowserConfig, token: str | None) -> IssueBrowser:
        client = GitHubGraphQLClient(
            token=token,
            endpoint=cfg.endpoint,
            timeout=cfg.timeout,
            retry=RetryConfig(
                attempts=cfg.retry_attempts,
                base_sleep=cfg.retry_base_sleep,
                max_sleep=cfg.retry_max_sleep,
            ),
        )
        return cls(
            client,
            issues_page_size=cfg.issues_page_size,
            reactions_last=cfg.reactions_last,
        )

    @property
    def snapshot(self) -> Snapshot:
        return self.store.get_snapshot()

    # ---- fetching ------------------------------------------------------
    def fetch_issues(self, path: str, cursor: str | None = None) -> Snapshot:
        owner_repo = split_path(path)
        ticket = self.store.begin_fetch()
        return self._fetch(path, owner_repo, cursor, ticket)

    def search(self, path: str) -> Snapshot:
        """Start over on ``path`` (initial fetch, full replacement)."""
        return self.fetch_issues(path)

    def fetch_more(self) -> Snapshot:
        """Fetch the next page of issues after the current end cursor."""
        path = self.path
        if path is None:
            raise PreconditionViolation("no further page available to load")
        owner_repo = split_path(path)
        ticket, cursor = self.store.begin_continuation()
        return self._fetch(path, owner_repo, cursor, ticket)

    def _fetch(
        self, path: str, owner_repo: tuple[str, str], cursor: str | None, ticket: int
    ) -> Snapshot:
        organization, repository = owner_repo
        variables: dict[str, Any] = {
            "organization": organization,
            "repository": repository,
            "cursor": cursor,
            "first": self.issues_page_size,
            "reactionsLast": self.reactions_last,
        }
        try:
            with self.logger.timed_operation("fetch_issues", path=path, cursor=cursor):
                try:
                    raw = self.transport.execute(GET_ISSUES_OF_REPOSITORY, variables)
                    result = parse_envelope(raw)
                except TransportError as exc:
                    info = classify_error(exc)
                    self.logger.log_fetch(
                        path,
                        cursor,
                        outcome="transport_error",
                        category=info.category,
                        error=info.message,
                    )
                    return self.store.on_transport_failure(str(exc))
                if isinstance(result, ErrorResult):
                    self.logger.log_fetch(
                        path, cursor, outcome="graphql_error", error=" ".join(result.messages)
                    )
                else:
                    self.logger.log_fetch(path, cursor, outcome="data")
                self.path = path
                return self.store.on_fetch_result(result, cursor)
        except BaseException:
            # the slot is only released here; a successful install settles it
            self.store.abort_fetch(ticket)
            raise

    def fetch_all(self, path: str, max_pages: int | None = None) -> Snapshot:
        """Initial fetch followed by continuations while pages remain (bounded by ``max_pages``)."""
        snapshot = self.fetch_issues(path)
        pages = 1
        while self.store.can_load_more and (max_pages is None or pages < max_pages):
            snapshot = self.fetch_more()
            pages += 1
            if snapshot.errors:
                break
        return snapshot

    # ---- mutations -----------------------------------------------------
    def star_repository(self, repository_id: str) -> Snapshot:
        return self._star_mutation(ADD_STAR, "addStar", repository_id)

    def unstar_repository(self, repository_id: str) -> Snapshot:
        return self._star_mutation(REMOVE_STAR, "removeStar", repository_id)

    def toggle_star(self) -> Snapshot:
        repo = self.store.get_snapshot().repository
        if repo is None:
            raise PreconditionViolation("no repository loaded to star")
        if repo.viewer_has_starred:
            return self.unstar_repository(repo.id)
        return self.star_repository(repo.id)

    def _star_mutation(self, document: str, field_name: str, repository_id: str) -> Snapshot:
        if self.store.get_snapshot().repository is None:
            raise PreconditionViolation("star mutation requested before a repository was loaded")
        with self.logger.timed_operation(field_name, repository_id=repository_id):
            raw = self.transport.execute(document, {"repositoryId": repository_id})
            result = parse_envelope(raw)
            if isinstance(result, ErrorResult):
                raise MutationError(result.messages)
            outcome = StarMutationResult.from_payload(result.payload, field_name)
            self.logger.log_operation(
                "star_resolved",
                repository_id=repository_id,
                viewer_has_starred=outcome.viewer_has_starred,
            )
            return self.store.on_mutation_result(outcome)


__all__ = ["IssueBrowser", "split_path"]
