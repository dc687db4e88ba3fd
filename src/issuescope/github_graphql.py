from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

import requests

from .errors import TransportError
from .retry import RetryConfig, TransientHTTPError, is_transient_response, run_with_retries

DEFAULT_GRAPHQL_URL = "https://api.github.com/graphql"
USER_AGENT = "issuescope-graphql/0.1.0"
DEFAULT_TIMEOUT = 30.0
_SUCCESS_RANGE = range(200, 300)


class GraphQLTransport(Protocol):  # pragma: no cover - interface only
    def execute(self, document: str, variables: Mapping[str, Any]) -> Any: ...


@dataclass
class GitHubGraphQLClient:
    """Posts GraphQL documents to GitHub and returns the raw JSON envelope.

    Anything that prevents a JSON object from coming back (network failure,
    non-2xx status, undecodable body) is raised as ``TransportError``;
    GraphQL ``errors`` are left in the envelope for the caller to classify.
    """

    token: str | None = None
    endpoint: str = DEFAULT_GRAPHQL_URL
    timeout: float = DEFAULT_TIMEOUT
    retry: RetryConfig | None = None
    session: requests.Session | None = None
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = self.session or requests.Session()
        if self.token:
            self._session.headers.setdefault("Authorization", f"bearer {self.token}")
        self._session.headers.setdefault("Accept", "application/json")
        self._session.headers.setdefault("User-Agent", USER_AGENT)

    def _post(self, payload: dict[str, Any]) -> requests.Response:
        response = self._session.post(
            self.endpoint,
            json=payload,
            timeout=self.timeout,
        )
        if is_transient_response(response):
            raise TransientHTTPError(response)
        return response

    def execute(self, document: str, variables: Mapping[str, Any] | None = None) -> Any:
        payload = {"query": document, "variables": dict(variables or {})}
        try:
            response = run_with_retries(lambda: self._post(payload), cfg=self.retry)
        except requests.RequestException as exc:
            raise TransportError(f"Request to {self.endpoint} failed: {exc}") from exc
        if response.status_code not in _SUCCESS_RANGE:
            raise TransportError(
                f"Request failed with status code {response.status_code}",
                status=response.status_code,
                response_text=response.text,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(
                f"Response from {self.endpoint} is not valid JSON",
                status=response.status_code,
                response_text=response.text,
            ) from exc


__all__ = [
    "DEFAULT_GRAPHQL_URL",
    "GitHubGraphQLClient",
    "GraphQLTransport",
]
