from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from maids.allocation.allocator import Allocator
from maids.errors import AllocationError
from maids.models import AppId

logger = logging.getLogger(__name__)


@dataclass
class AllocationResult:
    """Outcome of one batch: both lists keep the input order."""

    errors: list[AllocationError] = field(default_factory=list)
    successes: list[AppId] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.errors)


class BatchCoordinator:
    """Run a batch of app IDs through the :class:`Allocator`.

    Every item is allocated exactly once and its outcome never affects
    its siblings: a duplicate or store error is recorded against the
    item (with its ``index`` in the batch) and the batch carries on.

    ``concurrency`` bounds how many inserts are in flight.  The default
    of 1 processes items strictly one after another, keeping load on the
    shared store low while generated ids are being retried.
    """

    def __init__(self, allocator: Allocator, *, concurrency: int = 1) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self._allocator = allocator
        self._concurrency = concurrency

    async def allocate_all(
        self,
        app_ids: Sequence[AppId],
        retries: int | None = None,
    ) -> AllocationResult:
        result = AllocationResult()
        if not app_ids:
            return result

        outcomes: list[AppId | AllocationError | None] = [None] * len(app_ids)

        async def _run(index: int, app_id: AppId) -> None:
            try:
                outcomes[index] = await self._allocator.allocate(app_id, retries)
            except AllocationError as exc:
                exc.index = index
                outcomes[index] = exc

        if self._concurrency == 1:
            for index, app_id in enumerate(app_ids):
                await _run(index, app_id)
        else:
            semaphore = asyncio.Semaphore(self._concurrency)

            async def _bounded(index: int, app_id: AppId) -> None:
                async with semaphore:
                    await _run(index, app_id)

            # an unexpected exception cancels the remaining items
            async with asyncio.TaskGroup() as tg:
                for index, app_id in enumerate(app_ids):
                    tg.create_task(_bounded(index, app_id))

        for outcome in outcomes:
            if isinstance(outcome, AllocationError):
                result.errors.append(outcome)
            elif outcome is not None:
                result.successes.append(outcome)

        logger.info(
            "Allocated %d of %d app IDs (%d errors)",
            len(result.successes),
            len(app_ids),
            len(result.errors),
        )
        return result
