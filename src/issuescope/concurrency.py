"""Async facade over :class:`IssueBrowser`.

Blocking transport calls run on a thread pool so an event loop can keep a
"load more" and a star mutation in flight together. Ordering of snapshot
writes is handled by the store's lock; the in-flight guard still rejects a
second concurrent fetch.
"""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from types import TracebackType
from typing import Any, TypeVar

from .browser import IssueBrowser
from .logging import get_logger
from .models import Snapshot

T = TypeVar('T')


class ConcurrencyConfig:
    """Configuration for concurrency settings."""

    def __init__(self, max_workers: int = 2):
        self.max_workers = max_workers


class AsyncIssueBrowser:
    """Async wrapper for browser fetches and mutations."""

    def __init__(self, browser: IssueBrowser, config: ConcurrencyConfig | None = None):
        self.browser = browser
        self.config = config or ConcurrencyConfig()
        self.logger = get_logger()
        self._executor: ThreadPoolExecutor | None = None

    def __enter__(self) -> AsyncIssueBrowser:
        self._executor = ThreadPoolExecutor(max_workers=self.config.max_workers)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._executor:
            self._executor.shutdown(wait=True)
            self._executor = None

    async def __aenter__(self) -> AsyncIssueBrowser:
        return self.__enter__()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)

    async def _run(self, func: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(func, *args))

    @property
    def snapshot(self) -> Snapshot:
        return self.browser.snapshot

    async def fetch_issues(self, path: str, cursor: str | None = None) -> Snapshot:
        self.logger.debug("Fetching issues async", path=path, cursor=cursor)
        return await self._run(self.browser.fetch_issues, path, cursor)

    async def fetch_more(self) -> Snapshot:
        return await self._run(self.browser.fetch_more)

    async def star_repository(self, repository_id: str) -> Snapshot:
        return await self._run(self.browser.star_repository, repository_id)

    async def unstar_repository(self, repository_id: str) -> Snapshot:
        return await self._run(self.browser.unstar_repository, repository_id)


def create_async_browser(
    browser: IssueBrowser, config: ConcurrencyConfig | None = None
) -> AsyncIssueBrowser:
    """Factory function to create async browser."""
    return AsyncIssueBrowser(browser, config)


__all__ = ["AsyncIssueBrowser", "ConcurrencyConfig", "create_async_browser"]
