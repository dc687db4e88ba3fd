"""IssueScope - paginated GitHub issue browsing over GraphQL.

High-level public API:

from issuescope import IssueBrowser, GitHubGraphQLClient

browser = IssueBrowser(GitHubGraphQLClient(token="..."))
snapshot = browser.fetch_issues("octocat/Hello-World")
while browser.store.can_load_more:
    snapshot = browser.fetch_more()
snapshot = browser.star_repository(snapshot.repository.id)

The snapshot is immutable; every fetch or mutation installs a new one in the
browser's ``SnapshotStore``.
"""

from __future__ import annotations

from .accumulator import accumulate
from .browser import IssueBrowser, split_path
from .config import BrowserConfig, load_config
from .envelope import DataResult, ErrorResult, parse_envelope
from .github_graphql import GitHubGraphQLClient
from .models import Organization, Snapshot
from .resolver import StarMutationResult, apply_star_mutation
from .store import FetchState, SnapshotStore

__version__ = "0.1.0"

__all__ = [
    "BrowserConfig",
    "DataResult",
    "ErrorResult",
    "FetchState",
    "GitHubGraphQLClient",
    "IssueBrowser",
    "Organization",
    "Snapshot",
    "SnapshotStore",
    "StarMutationResult",
    "accumulate",
    "apply_star_mutation",
    "load_config",
    "parse_envelope",
    "split_path",
    "__version__",
]
