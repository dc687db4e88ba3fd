from __future__ import annotations

import pytest
from payloads import organization_payload

from issuescope.errors import PayloadError
from issuescope.models import (
    ErrorMessage,
    Organization,
    Page,
    PageInfo,
    Snapshot,
    decode_organization,
)


def test_decode_organization_tree():
    org = decode_organization({"organization": organization_payload(["I1", "I2"], stars=3)})

    repo = org.repository
    assert org.name == "octocat"
    assert repo.id == "R1"
    assert repo.stargazers.total_count == 3
    assert [i.id for i in repo.issues.nodes] == ["I1", "I2"]
    assert repo.issues.edges[0].id == "I1"


def test_missing_page_info_and_total_default():
    page = Page.from_payload({"edges": [{"node": {"id": "X", "content": "HEART"}}]}, lambda n: n)
    assert page.page_info == PageInfo(end_cursor=None, has_next_page=False)
    assert page.total_count == 1


@pytest.mark.parametrize(
    "data",
    [
        None,
        {"organization": None},
        {"organization": {"name": "octocat", "repository": None}},
        {"organization": {"name": "octocat", "repository": {"name": "no-id"}}},
        {"organization": {"repository": {"id": "R1", "issues": {"edges": "nope"}}}},
    ],
)
def test_malformed_payloads_raise(data):
    with pytest.raises(PayloadError):
        decode_organization(data)


def test_snapshot_payload_shape():
    org = Organization.from_payload(organization_payload(["I1"], end_cursor="c9", has_next_page=True))
    payload = Snapshot(organization=org, errors=(ErrorMessage("x"),)).to_payload()

    issues = payload["organization"]["repository"]["issues"]
    assert issues["pageInfo"] == {"endCursor": "c9", "hasNextPage": True}
    assert issues["edges"][0]["node"]["reactions"]["edges"] == []
    assert payload["errors"] == [{"message": "x"}]
    assert Snapshot.empty().to_payload() == {"organization": None, "errors": []}


def test_error_message_from_non_mapping():
    assert ErrorMessage.from_payload("plain") == ErrorMessage("plain")


def test_boolean_counts_are_not_taken_as_numbers():
    page = Page.from_payload(
        {"edges": [{"node": "a"}, {"node": "b"}], "totalCount": True}, lambda n: n
    )
    assert page.total_count == 2

    payload = organization_payload(["I1"])
    payload["repository"]["stargazers"] = {"totalCount": False}
    assert Organization.from_payload(payload).repository.stargazers.total_count == 0
