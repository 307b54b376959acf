"""Store doubles for exercising the allocator and batch coordinator.

:class:`RecordingStore` wraps a real store (an :class:`InMemoryStore`
by default) and records every conditional insert it sees.  It can also
inject the situations that are hard to provoke against a real backend:
forced collisions, backend failures and slow round-trips.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from maids.errors import StoreError
from maids.models import AppId
from maids.store.base import InsertOutcome, Store
from maids.store.memory import InMemoryStore


class RecordingStore(Store):
    """Delegating store that records attempts and injects faults.

    Args:
        inner: Store to delegate to.
        conflicts: The first *conflicts* inserts report
            ``ALREADY_EXISTS`` without reaching *inner*.
        fail_on: Ids whose insert raises :class:`StoreError`.
        latency: Seconds to sleep before each insert, so concurrent
            callers interleave.
    """

    def __init__(
        self,
        inner: Store | None = None,
        *,
        conflicts: int = 0,
        fail_on: Iterable[str] = (),
        latency: float = 0.0,
    ) -> None:
        self.inner = inner if inner is not None else InMemoryStore()
        self.attempts: list[str] = []
        self._conflicts = conflicts
        self._fail_on = set(fail_on)
        self._latency = latency
        self.in_flight = 0
        self.max_in_flight = 0

    async def init(self) -> None:
        await self.inner.init()

    async def reset(self) -> None:
        self.attempts.clear()
        await self.inner.reset()

    async def close(self) -> None:
        await self.inner.close()

    async def insert_if_absent(self, app_id: AppId) -> InsertOutcome:
        self.attempts.append(app_id.id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self._latency:
                await asyncio.sleep(self._latency)
            if app_id.id in self._fail_on:
                raise StoreError("injected failure", reference_data=app_id.to_dict())
            if self._conflicts > 0:
                self._conflicts -= 1
                return InsertOutcome.ALREADY_EXISTS
            return await self.inner.insert_if_absent(app_id)
        finally:
            self.in_flight -= 1

    async def exists(self, id: str) -> bool:
        return await self.inner.exists(id)

    async def get(self, id: str) -> AppId | None:
        return await self.inner.get(id)
