from __future__ import annotations

from maids.models import AppId
from maids.store.base import InsertOutcome, Store


class InMemoryStore(Store):
    """Store backed by a plain Python dict.

    ``insert_if_absent`` checks and writes without awaiting in between,
    so it is atomic within a single asyncio event loop.  Not shared
    across processes.
    """

    def __init__(self) -> None:
        self._app_ids: dict[str, AppId] = {}

    # ── Lifecycle ────────────────────────────────────────────────────

    async def init(self) -> None:
        pass

    async def reset(self) -> None:
        self._app_ids.clear()

    async def close(self) -> None:
        pass

    # ── App IDs ──────────────────────────────────────────────────────

    async def insert_if_absent(self, app_id: AppId) -> InsertOutcome:
        if app_id.id in self._app_ids:
            return InsertOutcome.ALREADY_EXISTS
        self._app_ids[app_id.id] = app_id
        return InsertOutcome.APPLIED

    async def exists(self, id: str) -> bool:
        return id in self._app_ids

    async def get(self, id: str) -> AppId | None:
        return self._app_ids.get(id)

    def __len__(self) -> int:
        return len(self._app_ids)
