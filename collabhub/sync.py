"""Fetch scoping for views.

A view owns a ``ViewScope``; fetches it starts run as tasks of the scope.
Closing the scope cancels whatever is still in flight, and a result that
resolves after the close is never handed back to the view.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StaleResult(Exception):
    """The scope closed before the fetch result could be delivered."""


class ViewScope:
    def __init__(self, name: str = "view"):
        self.name = name
        self.closed = False
        self._tasks: set[asyncio.Task] = set()

    async def run(self, fetch: Awaitable[T]) -> T:
        if self.closed:
            if asyncio.iscoroutine(fetch):
                fetch.close()
            raise StaleResult(f"{self.name} is closed")

        task = asyncio.ensure_future(fetch)
        self._tasks.add(task)
        try:
            result = await asyncio.shield(task)
        except asyncio.CancelledError:
            if self.closed:
                raise StaleResult(f"{self.name} closed while fetching") from None
            task.cancel()
            raise
        finally:
            self._tasks.discard(task)

        if self.closed:
            logger.debug("Dropping result resolved after %s closed", self.name)
            raise StaleResult(f"{self.name} closed while fetching")
        return result

    def close(self) -> None:
        self.closed = True
        for task in list(self._tasks):
            task.cancel()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def __aenter__(self) -> "ViewScope":
        return self

    async def __aexit__(self, *exc) -> None:
        self.close()
