from __future__ import annotations

import logging

from maids.errors import DuplicateAppIdError
from maids.models import AppId
from maids.store.base import InsertOutcome, Store

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3


class Allocator:
    """Persist one app ID with a conditional insert, regenerating on conflict.

    Uniqueness is decided by the store's atomic insert alone; nothing is
    cached here, so any number of allocators (in any number of
    processes) can share a table.

    Retry policy:

    * a generated id that collides is replaced by a fresh one, up to
      ``retries`` times (so at most ``retries + 1`` ids are tried);
    * a caller-supplied id is tried exactly once;
    * a :class:`~maids.errors.StoreError` propagates immediately and
      does not consume the budget.
    """

    def __init__(self, store: Store, *, max_retries: int = DEFAULT_MAX_RETRIES) -> None:
        self._store = store
        self._max_retries = max_retries

    @property
    def max_retries(self) -> int:
        return self._max_retries

    async def allocate(self, app_id: AppId, retries: int | None = None) -> AppId:
        """Store *app_id* and return the stored copy (``applied=True``).

        Raises:
            DuplicateAppIdError: the id exists and cannot be regenerated,
                or the retry budget ran out.
            StoreError: the backend failed; the write outcome is unknown.
        """
        budget = self._max_retries if retries is None else retries
        budget = max(0, budget) if app_id.is_generated else 0

        candidate = app_id
        while True:
            outcome = await self._store.insert_if_absent(candidate)
            if outcome is InsertOutcome.APPLIED:
                logger.debug(
                    "Stored app ID %s for %s", candidate.id, candidate.created_by
                )
                return candidate.mark_applied()

            if budget <= 0:
                logger.warning("App ID %s already exists", candidate.id)
                raise DuplicateAppIdError(candidate)

            logger.debug(
                "Generated app ID %s already exists, regenerating (%d retries left)",
                candidate.id,
                budget,
            )
            candidate = candidate.with_new_id()
            budget -= 1
