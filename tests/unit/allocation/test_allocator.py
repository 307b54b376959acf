from __future__ import annotations

import pytest

from maids.allocation import Allocator
from maids.errors import DuplicateAppIdError, StoreError
from maids.models import AppId
from maids.store.memory import InMemoryStore
from maids.testing import RecordingStore

# ── Fresh ids ───────────────────────────────────────────────────────


async def test_allocate_stores_generated_id(store: InMemoryStore) -> None:
    allocator = Allocator(store)
    candidate = AppId.new("u1")

    stored = await allocator.allocate(candidate)

    assert stored.id == candidate.id
    assert stored.applied is True
    assert await store.exists(candidate.id)


async def test_allocate_stores_supplied_id(store: InMemoryStore) -> None:
    allocator = Allocator(store)

    stored = await allocator.allocate(AppId.new("u1", id="a"))

    assert stored.id == "a"
    assert stored.is_generated is False
    assert stored.applied is True


# ── Retry policy ────────────────────────────────────────────────────


async def test_generated_id_is_regenerated_on_conflict() -> None:
    recording = RecordingStore(conflicts=2)
    allocator = Allocator(recording, max_retries=3)
    candidate = AppId.new("u1")

    stored = await allocator.allocate(candidate)

    assert len(recording.attempts) == 3
    assert len(set(recording.attempts)) == 3
    assert recording.attempts[0] == candidate.id
    assert stored.id == recording.attempts[-1]
    assert stored.created_by == "u1"
    assert stored.created_on == candidate.created_on


@pytest.mark.parametrize("retries", [0, 1, 3, 5])
async def test_retries_are_bounded(retries: int) -> None:
    recording = RecordingStore(conflicts=100)
    allocator = Allocator(recording)

    with pytest.raises(DuplicateAppIdError) as excinfo:
        await allocator.allocate(AppId.new("u1"), retries)

    assert len(recording.attempts) == retries + 1
    assert len(set(recording.attempts)) == retries + 1
    assert excinfo.value.id == recording.attempts[-1]


async def test_default_budget_comes_from_constructor() -> None:
    recording = RecordingStore(conflicts=100)
    allocator = Allocator(recording, max_retries=2)

    with pytest.raises(DuplicateAppIdError):
        await allocator.allocate(AppId.new("u1"))

    assert allocator.max_retries == 2
    assert len(recording.attempts) == 3


async def test_negative_budget_means_single_attempt() -> None:
    recording = RecordingStore(conflicts=100)
    allocator = Allocator(recording)

    with pytest.raises(DuplicateAppIdError):
        await allocator.allocate(AppId.new("u1"), -4)

    assert len(recording.attempts) == 1


async def test_supplied_id_is_never_retried(store: InMemoryStore) -> None:
    await store.insert_if_absent(AppId.new("someone-else", id="taken"))
    recording = RecordingStore(store)
    allocator = Allocator(recording, max_retries=10)

    with pytest.raises(DuplicateAppIdError) as excinfo:
        await allocator.allocate(AppId.new("u1", id="taken"))

    assert recording.attempts == ["taken"]
    assert excinfo.value.id == "taken"
    assert excinfo.value.status == 400
    assert excinfo.value.reference_data["createdBy"] == "u1"
    stored = await store.get("taken")
    assert stored is not None
    assert stored.created_by == "someone-else"


async def test_store_error_propagates_without_retry() -> None:
    candidate = AppId.new("u1")
    recording = RecordingStore(fail_on=[candidate.id])
    allocator = Allocator(recording, max_retries=3)

    with pytest.raises(StoreError) as excinfo:
        await allocator.allocate(candidate)

    assert recording.attempts == [candidate.id]
    assert excinfo.value.reason == "injected failure"
    assert excinfo.value.status == 500
