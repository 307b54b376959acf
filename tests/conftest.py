from __future__ import annotations

import pytest

from maids.config import AppIdsConfig
from maids.facade.core import Maids
from maids.store.memory import InMemoryStore
from maids.testing import RecordingStore

OWNER = "u1"


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def recording(store: InMemoryStore) -> RecordingStore:
    """A recording wrapper around the plain in-memory ``store`` fixture."""
    return RecordingStore(store)


@pytest.fixture()
def maids(recording: RecordingStore) -> Maids:
    return Maids(store=recording, config=AppIdsConfig())


@pytest.fixture()
def trusted_maids(recording: RecordingStore) -> Maids:
    """Maids with both trusted test-mode switches turned on."""
    config = AppIdsConfig(can_set_ids_in_create=True, can_set_retries_in_create=True)
    return Maids(store=recording, config=config)
