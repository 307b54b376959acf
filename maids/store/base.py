from __future__ import annotations

from abc import ABC, abstractmethod
from enum import StrEnum
from types import TracebackType

from maids.models import AppId


class InsertOutcome(StrEnum):
    APPLIED = "applied"
    ALREADY_EXISTS = "already_exists"


class Store(ABC):
    """Abstract store for application IDs.

    Implementations must override every ``@abstractmethod`` and must
    raise :class:`~maids.errors.StoreError` for any backend failure
    (driver errors, lost connections, timeouts) instead of guessing an
    outcome.
    """

    # ── Lifecycle ────────────────────────────────────────────────────

    @abstractmethod
    async def init(self) -> None:
        """Create the table (idempotent)."""
        ...

    @abstractmethod
    async def reset(self) -> None:
        """Drop all rows."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release any held resources (connections, pools)."""
        ...

    async def __aenter__(self) -> Store:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ── App IDs ──────────────────────────────────────────────────────

    @abstractmethod
    async def insert_if_absent(self, app_id: AppId) -> InsertOutcome:
        """Insert *app_id* only if no row with the same ``id`` exists.

        Must be a single atomic operation at the backend, never a
        lookup followed by a write.
        """
        ...

    @abstractmethod
    async def exists(self, id: str) -> bool:
        """Return whether a row with this ``id`` exists.

        Informational only: the answer may be stale by the time the
        caller acts on it, so it must not gate an insert.
        """
        ...

    @abstractmethod
    async def get(self, id: str) -> AppId | None:
        """Return the stored app ID, or ``None``."""
        ...
