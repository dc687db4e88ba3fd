from __future__ import annotations

import pytest
import requests

from issuescope import retry

# Constants for test expectations
FIRST_SUCCESS_ATTEMPT = 2  # transient once then success
EXPECTED_RETRY_COUNT = 2  # total attempts when one retry occurs


class _Response:
    def __init__(self, status_code: int, text: str = "", headers: dict[str, str] | None = None):
        self.status_code = status_code
        self.text = text
        self.headers = headers or {}


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch):
    slept: list[float] = []
    monkeypatch.setattr(retry.time, "sleep", slept.append)
    return slept


def test_is_transient_tokens():
    assert retry.is_transient('API rate limit exceeded')
    assert retry.is_transient('You have exceeded a secondary rate limit')
    assert retry.is_transient('ABUSE DETECTION mechanism')
    assert not retry.is_transient('some other error')


def test_is_transient_response():
    assert retry.is_transient_response(_Response(502))
    assert retry.is_transient_response(_Response(403, 'secondary rate limit'))
    assert not retry.is_transient_response(_Response(403, 'Resource not accessible'))
    assert not retry.is_transient_response(_Response(401, 'Bad credentials'))


def test_default_config_is_one_shot(monkeypatch):
    monkeypatch.delenv('ISSUESCOPE_RETRY_ATTEMPTS', raising=False)
    assert retry.RetryConfig().attempts == 1
    monkeypatch.setenv('ISSUESCOPE_RETRY_ATTEMPTS', '4')
    assert retry.RetryConfig().attempts == 4


def test_run_with_retries_transient_then_success(_no_sleep):
    attempts: list[int] = []

    def fn():
        attempts.append(1)
        if len(attempts) < FIRST_SUCCESS_ATTEMPT:
            raise requests.ConnectionError('connection reset')
        return 'ok'

    result = retry.run_with_retries(fn, cfg=retry.RetryConfig(attempts=3, base_sleep=0.01))
    assert result == 'ok'
    assert len(attempts) == EXPECTED_RETRY_COUNT
    assert len(_no_sleep) == 1


def test_run_with_retries_non_transient():
    attempts: list[int] = []

    def fn():
        attempts.append(1)
        raise ValueError('bad document')

    with pytest.raises(ValueError):
        retry.run_with_retries(fn, cfg=retry.RetryConfig(attempts=4, base_sleep=0.01))
    assert len(attempts) == 1


def test_run_with_retries_exhausted_network_error_propagates():
    def fn():
        raise requests.Timeout('read timed out')

    with pytest.raises(requests.Timeout):
        retry.run_with_retries(fn, cfg=retry.RetryConfig(attempts=2, base_sleep=0.0))


def test_exhausted_transient_http_returns_last_response():
    response = _Response(503, 'unavailable')

    def fn():
        raise retry.TransientHTTPError(response)  # type: ignore[arg-type]

    assert retry.run_with_retries(fn, cfg=retry.RetryConfig(attempts=2, base_sleep=0.0)) is response


def test_retry_after_header_drives_sleep(_no_sleep):
    calls: list[int] = []

    def fn():
        calls.append(1)
        if len(calls) == 1:
            raise retry.TransientHTTPError(_Response(403, 'rate limit', {'Retry-After': '7'}))  # type: ignore[arg-type]
        return 'ok'

    assert retry.run_with_retries(fn, cfg=retry.RetryConfig(attempts=2, base_sleep=0.5)) == 'ok'
    assert _no_sleep == [7.0]


def test_max_sleep_caps_backoff(_no_sleep):
    calls: list[int] = []

    def fn():
        calls.append(1)
        if len(calls) == 1:
            raise requests.ConnectionError('wait 60 seconds')
        return 'ok'

    cfg = retry.RetryConfig(attempts=2, base_sleep=0.5, max_sleep=2.0)
    retry.run_with_retries(fn, cfg=cfg)
    assert _no_sleep == [2.0]
