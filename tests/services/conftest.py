"""Service test fixtures - collection store, fake durable store and sync controller.

Invariants:
    - Every test gets a fresh store and fake; nothing is shared between tests
    - The sync fixture is NOT started: tests decide when the startup load runs
    - Writers are closed at teardown so no background task outlives its loop
"""

import pytest

from mindpalace.core.collection_store import CollectionStore
from mindpalace.services.sync_controller import SyncController
from tests.services.fake_durable import FakeDurableStore


@pytest.fixture
def store(frozen_ids):
    return CollectionStore(frozen_ids)


@pytest.fixture
def durable():
    return FakeDurableStore()


@pytest.fixture
async def sync(store, durable):
    controller = SyncController(store, durable)
    yield controller
    durable.release_loads()
    durable.fail_writes = False
    await controller.close()
