from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from maids.db.models import AppIdRow, Base
from maids.errors import StoreError
from maids.models import AppId
from maids.store.base import InsertOutcome, Store

logger = logging.getLogger(__name__)

DEFAULT_OPERATION_TIMEOUT = 10.0
DEFAULT_CONNECT_ATTEMPTS = 5


class PostgresStore(Store):
    """Store backed by PostgreSQL via SQLAlchemy + asyncpg.

    The conditional insert is ``INSERT ... ON CONFLICT (id) DO NOTHING``;
    a row count of one means this call wrote the row.  Each operation is
    bounded by ``operation_timeout`` seconds and a timeout surfaces as
    :class:`StoreError`, since the write may or may not have landed.

    The engine is injected so one pool can be shared by the whole
    process; use :meth:`from_params` to build one from settings.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        *,
        operation_timeout: float | None = DEFAULT_OPERATION_TIMEOUT,
        connect_attempts: int = DEFAULT_CONNECT_ATTEMPTS,
    ) -> None:
        self._engine = engine
        self._session_factory = async_sessionmaker(engine, expire_on_commit=False)
        self._operation_timeout = operation_timeout
        self._connect_attempts = max(1, connect_attempts)

    @classmethod
    def from_params(
        cls,
        host: str,
        port: int,
        database: str,
        user: str,
        password: str,
        *,
        pool_size: int = 10,
        max_overflow: int = 20,
        operation_timeout: float | None = DEFAULT_OPERATION_TIMEOUT,
        connect_attempts: int = DEFAULT_CONNECT_ATTEMPTS,
    ) -> PostgresStore:
        url = f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{database}"
        engine = create_async_engine(
            url,
            echo=False,
            pool_size=pool_size,
            max_overflow=max_overflow,
        )
        return cls(
            engine,
            operation_timeout=operation_timeout,
            connect_attempts=connect_attempts,
        )

    @classmethod
    def from_config(cls, config: dict) -> PostgresStore:
        return cls.from_params(**config)

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        """Yield an auto-committing session, translating backend failures."""
        session = self._session_factory()
        try:
            async with asyncio.timeout(self._operation_timeout):
                try:
                    yield session
                    await session.commit()
                finally:
                    # close() rolls back anything left uncommitted
                    await session.close()
        except TimeoutError as exc:
            logger.error(
                "Postgres operation exceeded %ss, outcome unknown",
                self._operation_timeout,
            )
            raise StoreError("operation timed out") from exc
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Postgres operation failed: %s", exc)
            raise StoreError(str(exc)) from exc

    # ── Lifecycle ────────────────────────────────────────────────────

    async def init(self) -> None:
        """Create the table, retrying the first connection with backoff.

        This is the only place a failed backend call is retried; single
        operations never are.
        """
        retrying = AsyncRetrying(
            retry=retry_if_exception_type((OperationalError, DBAPIError, OSError)),
            stop=stop_after_attempt(self._connect_attempts),
            wait=wait_exponential_jitter(initial=0.5, max=10, jitter=0.5),
            before_sleep=_log_connect_retry,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    async with self._engine.begin() as conn:
                        await conn.run_sync(Base.metadata.create_all)
        except RetryError as exc:
            cause = exc.last_attempt.exception()
            raise StoreError(f"could not connect: {cause}") from cause
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    async def reset(self) -> None:
        async with self._session() as s:
            await s.execute(delete(AppIdRow))

    async def close(self) -> None:
        await self._engine.dispose()

    # ── App IDs ──────────────────────────────────────────────────────

    async def insert_if_absent(self, app_id: AppId) -> InsertOutcome:
        stmt = (
            insert(AppIdRow)
            .values(
                {
                    AppIdRow.id: app_id.id,
                    AppIdRow.created_by: app_id.created_by,
                    AppIdRow.created_on: app_id.created_on,
                    AppIdRow.is_generated: app_id.is_generated,
                }
            )
            .on_conflict_do_nothing(index_elements=["id"])
        )
        async with self._session() as s:
            result = await s.execute(stmt)
        if result.rowcount == 1:  # type: ignore[attr-defined]
            return InsertOutcome.APPLIED
        return InsertOutcome.ALREADY_EXISTS

    async def exists(self, id: str) -> bool:
        async with self._session() as s:
            found = (
                await s.execute(select(AppIdRow.id).where(AppIdRow.id == id))
            ).scalar_one_or_none()
        return found is not None

    async def get(self, id: str) -> AppId | None:
        async with self._session() as s:
            row = await s.get(AppIdRow, id)
        if row is None:
            return None
        return _app_id_from_orm(row)


def _log_connect_retry(retry_state) -> None:  # noqa: ANN001
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Postgres not reachable (attempt %d): %s",
        retry_state.attempt_number,
        exc,
    )


# ── ORM → domain converters ─────────────────────────────────────────


def _app_id_from_orm(row: AppIdRow) -> AppId:
    return AppId(
        id=row.id,
        created_by=row.created_by,
        created_on=row.created_on,
        is_generated=row.is_generated,
    )
