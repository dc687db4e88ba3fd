"""Apply a successful star/unstar mutation to the snapshot."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from .errors import PayloadError, PreconditionViolation
from .models import Snapshot, Stargazers

# The mutation only reports the resulting flag, so the counter moves by a
# fixed step. Unstarring therefore also adds one; kept as the observed behaviour.
STARGAZER_DELTA = 1


@dataclass(frozen=True)
class StarMutationResult:
    viewer_has_starred: bool

    @classmethod
    def from_payload(cls, data: Any, field_name: str) -> StarMutationResult:
        """Read ``data.<field_name>.starrable.viewerHasStarred`` (``addStar`` / ``removeStar``)."""
        root = data.get(field_name) if isinstance(data, Mapping) else None
        starrable = root.get("starrable") if isinstance(root, Mapping) else None
        flag = starrable.get("viewerHasStarred") if isinstance(starrable, Mapping) else None
        if not isinstance(flag, bool):
            raise PayloadError(f"{field_name} response missing starrable.viewerHasStarred")
        return cls(viewer_has_starred=flag)


def apply_star_mutation(current: Snapshot, result: StarMutationResult) -> Snapshot:
    if current.organization is None:
        raise PreconditionViolation("star mutation applied before a repository was loaded")
    repo = current.organization.repository
    updated = replace(
        repo,
        viewer_has_starred=result.viewer_has_starred,
        stargazers=Stargazers(total_count=repo.stargazers.total_count + STARGAZER_DELTA),
    )
    return replace(current, organization=replace(current.organization, repository=updated))


__all__ = ["STARGAZER_DELTA", "StarMutationResult", "apply_star_mutation"]
