"""Main facade for the maids library."""

from __future__ import annotations

import logging
import math
from types import TracebackType
from typing import TYPE_CHECKING, Any

from maids.allocation import AllocationResult, Allocator, BatchCoordinator
from maids.config import AppIdsConfig, parse_config
from maids.errors import (
    InvalidParameterError,
    MaxIdsInCreateExceededError,
    MaxIdsInRegisterExceededError,
    MissingRequiredParameterError,
    ValidationError,
)
from maids.facade.types import Reply
from maids.models import AppId

if TYPE_CHECKING:
    from maids.store.base import Store

logger = logging.getLogger(__name__)


class Maids:
    """Main entry point: register and create application IDs.

    Validates requests, turns them into candidate :class:`AppId` records
    and runs them through the batch coordinator.  Transport adapters
    (HTTP, CLI) authenticate the caller and pass the resulting owner
    identity in; nothing here trusts an owner from a request body.

    Usage::

        maids = Maids.from_config({"store": {"provider": "memory"}})
        await maids.init()
        reply = await maids.register("user-1", ["a", "b"])
    """

    def __init__(self, store: Store, config: AppIdsConfig | None = None) -> None:
        self._store = store
        self._config = config or AppIdsConfig()
        self._allocator = Allocator(store, max_retries=self._config.max_gen_retry)
        self._coordinator = BatchCoordinator(
            self._allocator, concurrency=self._config.concurrency
        )

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> Maids:
        """Construct a Maids instance from a configuration dict."""
        store, app_ids = parse_config(config)
        return cls(store=store, config=app_ids)

    @property
    def store(self) -> Store:
        return self._store

    @property
    def config(self) -> AppIdsConfig:
        return self._config

    async def init(self) -> None:
        """Create the app ID table if missing (non-destructive)."""
        await self._store.init()

    async def close(self) -> None:
        await self._store.close()

    async def __aenter__(self) -> Maids:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ── App IDs ──────────────────────────────────────────────────────

    async def register(
        self,
        owner: str,
        ids: Any,
        *,
        request_id: str | None = None,
    ) -> Reply:
        """Store caller-chosen ids for *owner*.

        Supplied ids are never regenerated: an id that already exists
        comes back as a ``duplicate_app_id`` error for that item while
        the other items are still stored.
        """
        reply = _new_reply(request_id)
        try:
            _require_owner(owner)
            candidates = self._build_register_candidates(owner, ids)
        except ValidationError as exc:
            logger.info("[%s] register rejected: %s", reply.id, exc.message)
            reply.add_errors(exc)
            return reply

        result = await self._coordinator.allocate_all(candidates, retries=0)
        _fill_reply(reply, result)
        logger.info(
            "[%s] register for %s: %d stored, %d failed",
            reply.id,
            owner,
            len(result.successes),
            len(result.errors),
        )
        return reply

    async def create(
        self,
        owner: str,
        num_of_ids: Any = None,
        *,
        ids: Any = None,
        retries: Any = None,
        request_id: str | None = None,
    ) -> Reply:
        """Generate *num_of_ids* new ids for *owner*.

        ``ids`` and ``retries`` are only honoured when the matching
        trusted-mode flag is on in :class:`AppIdsConfig`; otherwise they
        are ignored.  With ``ids``, the first ``len(ids)`` records use
        the supplied values but are still treated as generated.
        """
        reply = _new_reply(request_id)
        try:
            _require_owner(owner)
            count = self._parse_create_count(num_of_ids)
            budget = self._parse_retries(retries)
            candidates = self._build_create_candidates(owner, count, ids)
        except ValidationError as exc:
            logger.info("[%s] create rejected: %s", reply.id, exc.message)
            reply.add_errors(exc)
            return reply

        result = await self._coordinator.allocate_all(candidates, retries=budget)
        _fill_reply(reply, result)
        logger.info(
            "[%s] create for %s: %d stored, %d failed",
            reply.id,
            owner,
            len(result.successes),
            len(result.errors),
        )
        return reply

    async def get(self, id: str) -> AppId | None:
        """Look up a stored app ID (informational only)."""
        return await self._store.get(str(id))

    # ── Health ───────────────────────────────────────────────────────

    async def status(self, *, request_id: str | None = None) -> Reply:
        reply = _new_reply(request_id)
        reply.response = {"status": 200}
        return reply

    async def version(self, *, request_id: str | None = None) -> Reply:
        from maids import __version__

        reply = _new_reply(request_id)
        reply.response = {"version": __version__}
        return reply

    # ── Validation ───────────────────────────────────────────────────

    def _build_register_candidates(self, owner: str, ids: Any) -> list[AppId]:
        if not ids or not isinstance(ids, list | tuple):
            raise MissingRequiredParameterError("ids", reference_data=ids)

        limit = self._config.max_ids_in_register
        if len(ids) > limit:
            raise MaxIdsInRegisterExceededError(len(ids), limit)

        if not all(_is_scalar_id(value) for value in ids):
            raise InvalidParameterError("ids", "array of strings", reference_data=ids)

        return [AppId.new(owner, id=value, is_generated=False) for value in ids]

    def _parse_create_count(self, num_of_ids: Any) -> int:
        if num_of_ids is None or num_of_ids == 0 or num_of_ids == "":
            num_of_ids = 1

        if (
            isinstance(num_of_ids, bool)
            or not isinstance(num_of_ids, int | float)
            or not math.isfinite(num_of_ids)
            or num_of_ids != int(num_of_ids)
            or num_of_ids < 1
        ):
            raise InvalidParameterError("numOfIds", "number", reference_data=num_of_ids)

        count = int(num_of_ids)
        limit = self._config.max_ids_in_create
        if count > limit:
            raise MaxIdsInCreateExceededError(count, limit)
        return count

    def _parse_retries(self, retries: Any) -> int | None:
        if retries is None or not self._config.can_set_retries_in_create:
            return None
        if isinstance(retries, bool) or not isinstance(retries, int) or retries < 0:
            raise InvalidParameterError("retries", "number", reference_data=retries)
        return retries

    def _build_create_candidates(
        self, owner: str, count: int, ids: Any
    ) -> list[AppId]:
        if ids is None or not self._config.can_set_ids_in_create:
            return AppId.many(owner, count)

        if not isinstance(ids, list | tuple) or not all(_is_scalar_id(v) for v in ids):
            raise InvalidParameterError("ids", "array of strings", reference_data=ids)

        return [
            AppId.new(owner, id=ids[i] if i < len(ids) else None, is_generated=True)
            for i in range(count)
        ]


def _new_reply(request_id: str | None) -> Reply:
    if request_id is None:
        return Reply()
    return Reply(id=request_id)


def _require_owner(owner: Any) -> None:
    if not owner or not isinstance(owner, str):
        raise MissingRequiredParameterError("owner")


def _is_scalar_id(value: Any) -> bool:
    if isinstance(value, bool) or value is None:
        return False
    return isinstance(value, str | int | float) and str(value) != ""


def _fill_reply(reply: Reply, result: AllocationResult) -> None:
    reply.response = [app_id.to_dict() for app_id in result.successes]
    reply.add_errors(result.errors)
