from __future__ import annotations

import asyncio

from maids import Maids
from maids.models import AppId
from maids.store import InsertOutcome
from maids.store.postgres import PostgresStore

# ── Conditional insert ──────────────────────────────────────────────


async def test_insert_if_absent_applies_once(store: PostgresStore) -> None:
    first = await store.insert_if_absent(AppId.new("u1", id="a"))
    second = await store.insert_if_absent(AppId.new("u2", id="a"))

    assert first is InsertOutcome.APPLIED
    assert second is InsertOutcome.ALREADY_EXISTS
    stored = await store.get("a")
    assert stored is not None
    assert stored.created_by == "u1"
    assert stored.is_generated is False
    assert stored.created_on.tzinfo is not None


async def test_exists_and_get_missing(store: PostgresStore) -> None:
    assert not await store.exists("missing")
    assert await store.get("missing") is None


async def test_init_is_idempotent(store: PostgresStore) -> None:
    await store.insert_if_absent(AppId.new("u1", id="kept"))

    await store.init()

    assert await store.exists("kept")


async def test_concurrent_inserts_have_one_winner(store: PostgresStore) -> None:
    outcomes = await asyncio.gather(
        *(store.insert_if_absent(AppId.new(f"u{n}", id="contested")) for n in range(8))
    )

    assert outcomes.count(InsertOutcome.APPLIED) == 1
    assert outcomes.count(InsertOutcome.ALREADY_EXISTS) == 7


# ── Through the facade ──────────────────────────────────────────────


async def test_register_and_create(pg_maids: Maids) -> None:
    registered = await pg_maids.register("u1", ["a", "b"])
    duplicate = await pg_maids.register("u1", ["b", "c"])
    created = await pg_maids.create("u1", 5)

    assert registered.ok
    assert [r["id"] for r in duplicate.response] == ["c"]
    assert duplicate.errors[0].code == "duplicate_app_id"
    assert duplicate.errors[0].index == 0
    assert created.ok
    assert len({r["id"] for r in created.response}) == 5
