"""Plain-text view of a snapshot, used by the CLI."""

from __future__ import annotations

from .errors import join_error_messages
from .models import Issue, Snapshot

TITLE = "GitHub Issue Browser"
NO_INFORMATION = "No information yet ..."


def render_issue(issue: Issue) -> list[str]:
    lines = [f"  - {issue.title} <{issue.url}>"]
    for reaction in issue.reactions.nodes:
        lines.append(f"      {reaction.content}")
    return lines


def render_snapshot(snapshot: Snapshot, path: str) -> str:
    lines = [TITLE, f"Show open issues for https://github.com/{path}", ""]
    if snapshot.errors:
        lines.append(f"Something went wrong: {join_error_messages(snapshot.errors)}")
    organization = snapshot.organization
    if organization is None:
        if not snapshot.errors:
            lines.append(NO_INFORMATION)
        return "\n".join(lines)

    repo = organization.repository
    issues = repo.issues
    lines.append(f"Issues from Organization: {organization.name} <{organization.url}>")
    lines.append(f"In Repository: {repo.name} <{repo.url}>")
    star_action = "Unstar" if repo.viewer_has_starred else "Star"
    lines.append(f"{repo.stargazers.total_count} {star_action}")
    lines.append(f"Open issues ({len(issues.edges)} of {issues.total_count}):")
    for issue in issues.nodes:
        lines.extend(render_issue(issue))
    if issues.page_info.has_next_page:
        lines.append("More")
    return "\n".join(lines)


__all__ = ["NO_INFORMATION", "TITLE", "render_issue", "render_snapshot"]
