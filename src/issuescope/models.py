"""Immutable snapshot model for the organization → repository → issues → reactions tree.

Every entity is a frozen dataclass built from the camelCase GraphQL payload
via ``from_payload`` and serialised back with ``to_payload``. Edge sequences
are tuples so a produced snapshot can share structure with its predecessor
without any aliasing of mutable state.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from .errors import PayloadError

T = TypeVar("T")


def _require_mapping(payload: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise PayloadError(f"{what} payload missing or not an object")
    return payload


def _require_str(payload: Mapping[str, Any], key: str, what: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        raise PayloadError(f"{what} payload missing string field '{key}'")
    return value


def _count(value: Any, default: int) -> int:
    # bool is an int subclass; JSON true/false is not a count
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return default


@dataclass(frozen=True)
class PageInfo:
    end_cursor: str | None = None
    has_next_page: bool = False

    @classmethod
    def from_payload(cls, payload: Any) -> PageInfo:
        if payload is None:
            return cls()
        data = _require_mapping(payload, "pageInfo")
        cursor = data.get("endCursor")
        return cls(
            end_cursor=cursor if isinstance(cursor, str) else None,
            has_next_page=bool(data.get("hasNextPage", False)),
        )

    def to_payload(self) -> dict[str, Any]:
        return {"endCursor": self.end_cursor, "hasNextPage": self.has_next_page}


@dataclass(frozen=True)
class Edge(Generic[T]):
    """Connection wrapper around one node."""

    node: T

    @property
    def id(self) -> str | None:
        return getattr(self.node, "id", None)


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page (or an accumulated run of pages) of a connection."""

    edges: tuple[Edge[T], ...] = ()
    page_info: PageInfo = field(default_factory=PageInfo)
    total_count: int = 0

    @classmethod
    def from_payload(
        cls, payload: Any, node_factory: Callable[[Any], T], what: str = "connection"
    ) -> Page[T]:
        data = _require_mapping(payload, what)
        raw_edges = data.get("edges") or []
        if not isinstance(raw_edges, list):
            raise PayloadError(f"{what} edges must be a list")
        edges: list[Edge[T]] = []
        for raw in raw_edges:
            edge = _require_mapping(raw, f"{what} edge")
            edges.append(Edge(node=node_factory(edge.get("node"))))
        return cls(
            edges=tuple(edges),
            page_info=PageInfo.from_payload(data.get("pageInfo")),
            total_count=_count(data.get("totalCount"), len(edges)),
        )

    def to_payload(self, node_serializer: Callable[[T], Any]) -> dict[str, Any]:
        return {
            "edges": [{"node": node_serializer(e.node)} for e in self.edges],
            "totalCount": self.total_count,
            "pageInfo": self.page_info.to_payload(),
        }

    @property
    def nodes(self) -> list[T]:
        return [e.node for e in self.edges]


@dataclass(frozen=True)
class Reaction:
    id: str
    content: str

    @classmethod
    def from_payload(cls, payload: Any) -> Reaction:
        data = _require_mapping(payload, "reaction")
        return cls(id=_require_str(data, "id", "reaction"), content=str(data.get("content", "")))

    def to_payload(self) -> dict[str, Any]:
        return {"id": self.id, "content": self.content}


@dataclass(frozen=True)
class Issue:
    id: str
    title: str
    url: str
    reactions: Page[Reaction] = field(default_factory=Page)

    @classmethod
    def from_payload(cls, payload: Any) -> Issue:
        data = _require_mapping(payload, "issue")
        reactions_payload = data.get("reactions")
        return cls(
            id=_require_str(data, "id", "issue"),
            title=str(data.get("title", "")),
            url=str(data.get("url", "")),
            reactions=(
                Page.from_payload(reactions_payload, Reaction.from_payload, "reactions")
                if reactions_payload is not None
                else Page()
            ),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "reactions": self.reactions.to_payload(Reaction.to_payload),
        }


@dataclass(frozen=True)
class Stargazers:
    total_count: int = 0


@dataclass(frozen=True)
class Repository:
    id: str
    name: str
    url: str
    stargazers: Stargazers = field(default_factory=Stargazers)
    viewer_has_starred: bool = False
    issues: Page[Issue] = field(default_factory=Page)

    @classmethod
    def from_payload(cls, payload: Any) -> Repository:
        data = _require_mapping(payload, "repository")
        stargazers = data.get("stargazers")
        star_count = stargazers.get("totalCount") if isinstance(stargazers, Mapping) else None
        issues_payload = data.get("issues")
        return cls(
            id=_require_str(data, "id", "repository"),
            name=str(data.get("name", "")),
            url=str(data.get("url", "")),
            stargazers=Stargazers(total_count=_count(star_count, 0)),
            viewer_has_starred=bool(data.get("viewerHasStarred", False)),
            issues=(
                Page.from_payload(issues_payload, Issue.from_payload, "issues")
                if issues_payload is not None
                else Page()
            ),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "stargazers": {"totalCount": self.stargazers.total_count},
            "viewerHasStarred": self.viewer_has_starred,
            "issues": self.issues.to_payload(Issue.to_payload),
        }


@dataclass(frozen=True)
class Organization:
    name: str
    url: str
    repository: Repository

    @classmethod
    def from_payload(cls, payload: Any) -> Organization:
        data = _require_mapping(payload, "organization")
        return cls(
            name=str(data.get("name") or ""),
            url=str(data.get("url") or ""),
            repository=Repository.from_payload(data.get("repository")),
        )

    def to_payload(self) -> dict[str, Any]:
        return {"name": self.name, "url": self.url, "repository": self.repository.to_payload()}


@dataclass(frozen=True)
class ErrorMessage:
    message: str

    @classmethod
    def from_payload(cls, payload: Any) -> ErrorMessage:
        if isinstance(payload, Mapping):
            return cls(message=str(payload.get("message", "")))
        return cls(message=str(payload))

    def to_payload(self) -> dict[str, Any]:
        return {"message": self.message}


@dataclass(frozen=True)
class Snapshot:
    """The consistent client-side view: one organization tree plus outstanding errors."""

    organization: Organization | None = None
    errors: tuple[ErrorMessage, ...] = ()

    @classmethod
    def empty(cls) -> Snapshot:
        return cls()

    @property
    def repository(self) -> Repository | None:
        return self.organization.repository if self.organization else None

    @property
    def issues(self) -> Page[Issue] | None:
        repo = self.repository
        return repo.issues if repo else None

    def to_payload(self) -> dict[str, Any]:
        return {
            "organization": self.organization.to_payload() if self.organization else None,
            "errors": [e.to_payload() for e in self.errors],
        }


def decode_organization(data: Any) -> Organization:
    """Extract the organization tree from a GraphQL ``data`` payload."""
    root = _require_mapping(data, "data")
    return Organization.from_payload(root.get("organization"))


__all__ = [
    "Edge",
    "ErrorMessage",
    "Issue",
    "Organization",
    "Page",
    "PageInfo",
    "Reaction",
    "Repository",
    "Snapshot",
    "Stargazers",
    "decode_organization",
]
