"""Sync Controller - tests for load-and-seed, the load gate and write-through.

Invariants:
    - Startup never writes unless a mutation happened while loading
    - Loaded data is not written back
    - Mutations made while the load is in flight are persisted on top of the loaded data
    - Persist failures are counted and logged, memory keeps the mutation
"""

import asyncio
import logging

import pytest

from mindpalace.core.domain_types import ChangeOrigin, CollectionKind
from mindpalace.core.errors import DatabaseError
from mindpalace.core.seed_data import default_shelves
from mindpalace.core.snapshot import dump_shelves
from tests.helpers import layout, media_record, media_shelf

MEDIA = CollectionKind.MEDIA
INGREDIENT = CollectionKind.INGREDIENT


# -- Startup load --------------------------------------------------------------

@pytest.mark.asyncio
async def test_empty_store_keeps_seed_without_writing(store, durable, sync):
    await sync.start()
    await sync.drain()
    assert store.is_loading is False
    assert dump_shelves(store.media_shelves) == dump_shelves(default_shelves(MEDIA))
    assert durable.writes == []


@pytest.mark.asyncio
async def test_loaded_data_replaces_seed_and_is_not_written_back(store, durable, sync):
    durable.seed("audio_shelves", [media_record(30, 3), media_record(10, 1)])
    await sync.start()
    await sync.drain()
    assert layout(store.media_shelves) == {30: [3], 10: [1]}
    assert dump_shelves(store.ingredient_shelves) == dump_shelves(default_shelves(INGREDIENT))
    assert durable.writes == []


@pytest.mark.asyncio
async def test_failed_partition_load_keeps_its_seed(store, durable, sync, caplog):
    durable.seed("cafe_shelves", [{"id": 9, "title": "Stored", "items": []}])
    durable.seed("audio_shelves", [media_record(4, 40)])
    durable.fail_load.add("audio_shelves")
    with caplog.at_level(logging.WARNING):
        await sync.start()
    assert [s.id for s in store.ingredient_shelves] == [9]
    assert layout(store.media_shelves) == {1: [101, 102], 2: [201]}
    assert any(getattr(r, "error_code", None) == "LOAD_FAILURE" for r in caplog.records)


@pytest.mark.asyncio
async def test_open_failure_ends_loading_with_seed(store, durable, sync):
    durable.fail_open = True
    await sync.start()
    assert store.is_loading is False
    assert layout(store.media_shelves) == {1: [101, 102], 2: [201]}


@pytest.mark.asyncio
async def test_invalid_stored_records_keep_seed(store, durable, sync):
    durable.seed("audio_shelves", [media_record(1, 10), media_record(1, 11)])
    await sync.start()
    assert layout(store.media_shelves) == {1: [101, 102], 2: [201]}


@pytest.mark.asyncio
async def test_wait_until_loaded(store, durable, sync):
    durable.hold_loads()
    task = asyncio.create_task(sync.start())
    waiter = asyncio.create_task(sync.wait_until_loaded())
    await asyncio.sleep(0)
    assert not waiter.done()
    durable.release_loads()
    await task
    await asyncio.wait_for(waiter, timeout=1)


# -- Write-through -------------------------------------------------------------

@pytest.mark.asyncio
async def test_mutations_written_in_order(store, durable, sync):
    await sync.start()
    store.add_shelf(MEDIA, "Jazz")
    store.delete_item(MEDIA, 1, 101)
    await sync.drain()
    audio_writes = durable.written("audio_shelves")
    assert len(audio_writes) == 2
    assert audio_writes[0][-1]["title"] == "Jazz"
    assert [i["id"] for i in audio_writes[1][0]["items"]] == [102]
    assert durable.partitions["audio_shelves"] == dump_shelves(store.media_shelves)
    assert durable.written("cafe_shelves") == []


@pytest.mark.asyncio
async def test_write_persists_collection_as_of_its_transition(store, durable, sync):
    durable.write_delay = 0.01
    await sync.start()
    store.rename_shelf(INGREDIENT, 1, "First")
    store.rename_shelf(INGREDIENT, 1, "Second")
    await sync.drain()
    titles = [records[0]["title"] for records in durable.written("cafe_shelves")]
    assert titles == ["First", "Second"]


@pytest.mark.asyncio
async def test_forced_changes_are_not_written_through(store, durable, sync):
    await sync.start()
    store.replace(MEDIA, (media_shelf(5, 50),), ChangeOrigin.FORCED)
    await sync.drain()
    assert durable.writes == []


@pytest.mark.asyncio
async def test_persist_failure_is_counted_and_memory_kept(store, durable, sync, caplog):
    await sync.start()
    durable.fail_writes = True
    with caplog.at_level(logging.ERROR):
        store.delete_shelf(MEDIA, 2)
        await sync.drain()
    assert [s.id for s in store.media_shelves] == [1]
    stats = sync.stats()["audio"]
    assert stats["failed"] == 1
    assert stats["succeeded"] == 0
    assert "cannot write" in stats["last_error"]
    assert any(getattr(r, "error_code", None) == "PERSIST_FAILURE" for r in caplog.records)


@pytest.mark.asyncio
async def test_stats_count_successful_writes(store, durable, sync):
    await sync.start()
    store.add_shelf(INGREDIENT)
    await sync.drain()
    assert sync.stats()["cafe"] == {
        "submitted": 1, "succeeded": 1, "failed": 0, "last_error": None,
    }


# -- Load gate -----------------------------------------------------------------

@pytest.mark.asyncio
async def test_mutation_during_load_survives_and_is_persisted(store, durable, sync):
    durable.seed("audio_shelves", [media_record(7, 70)])
    durable.hold_loads()
    task = asyncio.create_task(sync.start())
    await asyncio.sleep(0)

    early = store.add_shelf(MEDIA, "Added while loading")
    await asyncio.sleep(0)
    assert durable.writes == []

    durable.release_loads()
    await task
    await sync.drain()

    assert [s.id for s in store.media_shelves] == [7, early.id]
    assert [r["id"] for r in durable.partitions["audio_shelves"]] == [7, early.id]
    assert len(durable.written("audio_shelves")) == 1
    assert durable.written("cafe_shelves") == []


@pytest.mark.asyncio
async def test_mutation_that_cannot_replay_is_dropped(store, durable, sync):
    durable.seed("audio_shelves", [media_record(7, 70)])
    durable.hold_loads()
    task = asyncio.create_task(sync.start())
    await asyncio.sleep(0)

    store.delete_item(MEDIA, 1, 101)

    durable.release_loads()
    await task
    await sync.drain()
    assert layout(store.media_shelves) == {7: [70]}
    assert durable.writes == []


# -- Forced persistence and shutdown -------------------------------------------

@pytest.mark.asyncio
async def test_persist_now_waits_for_the_write(store, durable, sync):
    await sync.start()
    store.replace(MEDIA, (media_shelf(5, 50),), ChangeOrigin.FORCED)
    await sync.persist_now(MEDIA)
    assert durable.partitions["audio_shelves"] == [media_record(5, 50)]


@pytest.mark.asyncio
async def test_persist_now_raises_on_failure(store, durable, sync):
    await sync.start()
    durable.fail_writes = True
    with pytest.raises(DatabaseError):
        await sync.persist_now(MEDIA)


@pytest.mark.asyncio
async def test_close_drains_pending_writes(store, durable, sync):
    durable.write_delay = 0.01
    await sync.start()
    for title in ("a", "b", "c"):
        store.add_shelf(INGREDIENT, title)
    await sync.close()
    assert len(durable.written("cafe_shelves")) == 3
    assert durable.partitions["cafe_shelves"][-1]["title"] == "c"


@pytest.mark.asyncio
async def test_no_writes_after_close(store, durable, sync):
    await sync.start()
    await sync.close()
    store.add_shelf(MEDIA)
    assert durable.writes == []


@pytest.mark.asyncio
async def test_persist_now_after_close_raises(store, durable, sync):
    await sync.start()
    await sync.close()
    with pytest.raises(RuntimeError, match="closed"):
        await asyncio.wait_for(sync.persist_now(MEDIA), timeout=1)
    assert durable.writes == []


@pytest.mark.asyncio
async def test_unstarted_controller_refuses_to_wait(sync):
    with pytest.raises(RuntimeError, match="never started"):
        await asyncio.wait_for(sync.wait_until_loaded(), timeout=1)
    with pytest.raises(RuntimeError, match="not started"):
        await asyncio.wait_for(sync.persist_now(MEDIA), timeout=1)
