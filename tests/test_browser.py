from __future__ import annotations

import pytest
from payloads import FakeTransport, edge_ids, envelope, organization_payload

from issuescope.browser import IssueBrowser, split_path
from issuescope.errors import (
    InvalidPathError,
    MutationError,
    PreconditionViolation,
    TransportError,
)
from issuescope.models import ErrorMessage
from issuescope.queries import ADD_STAR, GET_ISSUES_OF_REPOSITORY, REMOVE_STAR
from issuescope.store import FetchState

PATH = "octocat/Hello-World"


def test_split_path():
    assert split_path("octocat/Hello-World") == ("octocat", "Hello-World")
    assert split_path(" /octocat/Hello-World/ ") == ("octocat", "Hello-World")


@pytest.mark.parametrize("bad", ["", "octocat", "octocat/", "/Hello-World", "a/b/c"])
def test_split_path_rejects_malformed(bad):
    with pytest.raises(InvalidPathError):
        split_path(bad)


def test_invalid_path_never_reaches_transport():
    transport = FakeTransport()
    browser = IssueBrowser(transport)
    with pytest.raises(ValueError):
        browser.fetch_issues("no-slash")
    assert transport.calls == []
    assert browser.store.state is FetchState.IDLE


def test_initial_fetch_then_load_more_scenario():
    transport = FakeTransport(
        [
            envelope(organization_payload(["I1"], end_cursor="c1", has_next_page=True)),
            envelope(organization_payload(["I2"], end_cursor="c2", has_next_page=False)),
        ]
    )
    browser = IssueBrowser(transport)

    first = browser.fetch_issues(PATH)
    assert edge_ids(first.organization) == ["I1"]
    assert first.organization.repository.id == "R1"
    assert first.issues.page_info.has_next_page is True

    final = browser.fetch_more()
    assert edge_ids(final.organization) == ["I1", "I2"]
    assert final.issues.page_info.has_next_page is False
    assert browser.store.can_load_more is False

    document, variables = transport.calls[0]
    assert document == GET_ISSUES_OF_REPOSITORY
    assert variables == {
        "organization": "octocat",
        "repository": "Hello-World",
        "cursor": None,
        "first": 5,
        "reactionsLast": 3,
    }
    assert transport.calls[1][1]["cursor"] == "c1"


def test_fetch_more_requires_next_page():
    browser = IssueBrowser(FakeTransport())
    with pytest.raises(PreconditionViolation):
        browser.fetch_more()

    browser.transport.queue(envelope(organization_payload(["I1"], has_next_page=False)))
    browser.fetch_issues(PATH)
    with pytest.raises(PreconditionViolation):
        browser.fetch_more()


def test_graphql_errors_wipe_data():
    transport = FakeTransport(
        [
            envelope(organization_payload(["I1"], has_next_page=True)),
            {"data": None, "errors": [{"message": "Could not resolve to a Repository"}]},
        ]
    )
    browser = IssueBrowser(transport)
    browser.fetch_issues(PATH)

    snapshot = browser.fetch_more()

    assert snapshot.organization is None
    assert snapshot.errors == (ErrorMessage("Could not resolve to a Repository"),)


def test_transport_failure_on_load_more_keeps_data():
    transport = FakeTransport(
        [
            envelope(organization_payload(["I1"], end_cursor="c1", has_next_page=True)),
            TransportError("Network Error"),
            envelope(organization_payload(["I2"], end_cursor="c2")),
        ]
    )
    browser = IssueBrowser(transport)
    loaded = browser.fetch_issues(PATH)

    failed = browser.fetch_more()
    assert failed.organization is loaded.organization
    assert failed.errors == (ErrorMessage("Network Error"),)
    assert browser.store.state is FetchState.LOADED

    retried = browser.fetch_more()
    assert edge_ids(retried.organization) == ["I1", "I2"]
    assert retried.errors == ()
    assert transport.calls[2][1]["cursor"] == "c1"


def test_unexpected_exception_releases_fetch_slot():
    transport = FakeTransport([RuntimeError("bug in transport")])
    browser = IssueBrowser(transport)
    with pytest.raises(RuntimeError):
        browser.fetch_issues(PATH)
    assert browser.store.state is FetchState.IDLE


def test_interleaved_load_more_continues_from_latest_cursor(monkeypatch):
    transport = FakeTransport(
        [
            envelope(organization_payload(["I1"], end_cursor="c1", has_next_page=True)),
            envelope(organization_payload(["I2"], end_cursor="c2", has_next_page=True)),
            envelope(organization_payload(["I3"], end_cursor="c3", has_next_page=False)),
        ]
    )
    browser = IssueBrowser(transport)
    browser.fetch_issues(PATH)

    claim = browser.store.begin_continuation
    pending = [True]

    def _other_caller_finishes_first():
        if pending:
            pending.clear()
            browser.fetch_more()
        return claim()

    monkeypatch.setattr(browser.store, "begin_continuation", _other_caller_finishes_first)
    final = browser.fetch_more()

    assert [variables["cursor"] for _, variables in transport.calls] == [None, "c1", "c2"]
    assert edge_ids(final.organization) == ["I1", "I2", "I3"]


def test_finished_fetch_does_not_release_a_newer_fetch():
    transport = FakeTransport([envelope(organization_payload(["I1"]))])
    browser = IssueBrowser(transport)
    tickets = []

    def _next_caller_claims_slot(_snapshot):
        if not tickets:
            tickets.append(browser.store.begin_fetch())

    browser.store.subscribe(_next_caller_claims_slot)
    browser.fetch_issues(PATH)

    assert browser.store.state is FetchState.LOADING
    browser.store.abort_fetch(tickets[0])
    assert browser.store.state is FetchState.LOADED


def test_fetch_all_respects_page_limit():
    transport = FakeTransport(
        [
            envelope(organization_payload(["I1"], end_cursor="c1", has_next_page=True)),
            envelope(organization_payload(["I2"], end_cursor="c2", has_next_page=True)),
            envelope(organization_payload(["I3"], end_cursor="c3", has_next_page=False)),
        ]
    )
    browser = IssueBrowser(transport)

    snapshot = browser.fetch_all(PATH, max_pages=2)
    assert edge_ids(snapshot.organization) == ["I1", "I2"]

    snapshot = browser.fetch_all(PATH)
    assert transport.responses == []


def test_fetch_all_stops_on_transport_failure():
    transport = FakeTransport(
        [
            envelope(organization_payload(["I1"], end_cursor="c1", has_next_page=True)),
            TransportError("timeout"),
        ]
    )
    snapshot = IssueBrowser(transport).fetch_all(PATH)
    assert edge_ids(snapshot.organization) == ["I1"]
    assert snapshot.errors == (ErrorMessage("timeout"),)


def test_search_replaces_previous_repository():
    transport = FakeTransport(
        [
            envelope(organization_payload(["I1", "I2"], has_next_page=True)),
            envelope(organization_payload(["J1"], repo_id="R2")),
        ]
    )
    browser = IssueBrowser(transport)
    browser.fetch_issues(PATH)

    snapshot = browser.search("octocat/Spoon-Knife")

    assert edge_ids(snapshot.organization) == ["J1"]
    assert browser.path == "octocat/Spoon-Knife"


def _loaded_browser(*responses, stars=10, starred=False) -> IssueBrowser:
    transport = FakeTransport([envelope(organization_payload(["I1"], stars=stars, starred=starred))])
    transport.queue(*responses)
    browser = IssueBrowser(transport)
    browser.fetch_issues(PATH)
    return browser


def test_star_repository_updates_counters():
    browser = _loaded_browser({"data": {"addStar": {"starrable": {"viewerHasStarred": True}}}})

    snapshot = browser.star_repository("R1")

    repo = snapshot.repository
    assert repo.viewer_has_starred is True
    assert repo.stargazers.total_count == 11
    document, variables = browser.transport.calls[-1]
    assert document == ADD_STAR
    assert variables == {"repositoryId": "R1"}


def test_unstar_repository_adds_one_as_well():
    browser = _loaded_browser(
        {"data": {"removeStar": {"starrable": {"viewerHasStarred": False}}}}, starred=True
    )

    snapshot = browser.unstar_repository("R1")

    assert snapshot.repository.viewer_has_starred is False
    assert snapshot.repository.stargazers.total_count == 11
    assert browser.transport.calls[-1][0] == REMOVE_STAR


def test_toggle_star_picks_mutation_from_current_flag():
    browser = _loaded_browser(
        {"data": {"removeStar": {"starrable": {"viewerHasStarred": False}}}}, starred=True
    )
    browser.toggle_star()
    assert browser.transport.calls[-1][0] == REMOVE_STAR


def test_mutation_errors_leave_snapshot_untouched():
    browser = _loaded_browser(
        {"errors": [{"message": "Resource not accessible by integration"}]},
        TransportError("Network Error"),
    )
    before = browser.snapshot

    with pytest.raises(MutationError) as excinfo:
        browser.star_repository("R1")
    assert excinfo.value.messages == ["Resource not accessible by integration"]
    assert browser.snapshot is before

    with pytest.raises(TransportError):
        browser.star_repository("R1")
    assert browser.snapshot is before


def test_star_before_load_fails_loudly():
    browser = IssueBrowser(FakeTransport())
    with pytest.raises(PreconditionViolation):
        browser.star_repository("R1")
    assert browser.transport.calls == []
