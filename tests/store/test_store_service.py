import asyncio
import dataclasses

import pytest

from reviewflow.store import models, repository, seed, service, undo


def make_event(stars=3, was_redirected=False):
    return models.RatingEvent(stars=stars, source="web", was_redirected=was_redirected)


@pytest.fixture
def failing_repository(mocker):
    repo = mocker.AsyncMock(spec=repository.AbstractStoreRepository)
    error = models.StorageUnavailableError("storage offline")
    repo.read_state.side_effect = error
    repo.write_state.side_effect = error
    repo.read_undo.side_effect = error
    repo.write_undo.side_effect = error
    repo.clear_undo.side_effect = error
    return repo


@pytest.fixture
def offline_store(failing_repository, broker):
    return service.StoreService(
        store_repository=failing_repository,
        undo_ledger=undo.UndoLedger(failing_repository),
        broker=broker,
    )


@pytest.mark.asyncio
async def test_load_seeds_default_dataset_when_empty(store_service, store_repository):
    snapshot = await store_service.load()

    assert snapshot.config.slug == "bistro-co"
    assert [e.id for e in snapshot.events] == ["evt_1", "evt_2"]
    assert store_repository.documents == {}


@pytest.mark.asyncio
async def test_load_falls_back_to_default_dataset_when_storage_unavailable(
    offline_store,
):
    snapshot = await offline_store.load()

    assert snapshot.config == seed.DEFAULT_CONFIG


@pytest.mark.asyncio
async def test_save_publishes_change_notification(store_service, broker):
    queue = await broker.subscribe()

    result = await store_service.save(seed.default_snapshot(), reason="test")

    assert result == models.WriteResult(persisted=True)
    event = queue.get_nowait()
    assert event["type"] == "db-update"
    assert event["reason"] == "test"


@pytest.mark.asyncio
async def test_save_reports_lost_write_without_raising(offline_store, broker):
    queue = await broker.subscribe()

    result = await offline_store.save(seed.default_snapshot())

    assert result.persisted is False
    assert result.warning == service.STORAGE_WRITE_WARNING
    assert queue.empty()


@pytest.mark.asyncio
async def test_add_event_prepends(store_service):
    event = make_event()

    await store_service.add_event(event)

    snapshot = await store_service.load()
    assert snapshot.events[0] == event
    assert len(snapshot.events) == 3


@pytest.mark.asyncio
async def test_add_feedback_prepends(store_service):
    feedback = models.Feedback(rating_event_id="evt_x", stars=1, text="Bad")

    await store_service.add_feedback(feedback)

    snapshot = await store_service.load()
    assert snapshot.feedbacks[0] == feedback
    assert snapshot.feedbacks[1].id == "fb_1"


@pytest.mark.asyncio
async def test_add_event_while_offline_returns_warning(offline_store):
    result = await offline_store.add_event(make_event())

    assert result.persisted is False
    assert result.warning


@pytest.mark.asyncio
async def test_concurrent_writes_in_one_process_are_not_lost(store_service):
    events = [make_event(stars=s) for s in (1, 2, 3, 4, 5)]

    await asyncio.gather(*(store_service.add_event(e) for e in events))

    snapshot = await store_service.load()
    stored_ids = {e.id for e in snapshot.events}
    assert {e.id for e in events} <= stored_ids


@pytest.mark.asyncio
async def test_update_config_merges_and_records_undo(store_service):
    config, result = await store_service.update_config(min_star_threshold=3)

    assert result.persisted is True
    assert config.min_star_threshold == 3
    assert config.name == "Bistro & Co."

    entry = await store_service.get_undo_snapshot()
    assert entry.kind == "config"
    assert entry.previous.min_star_threshold == 4


@pytest.mark.asyncio
async def test_update_config_rejects_invalid_threshold_without_mutation(
    store_service,
):
    with pytest.raises(models.ValidationError):
        await store_service.update_config(min_star_threshold=9)

    snapshot = await store_service.load()
    assert snapshot.config.min_star_threshold == 4
    assert await store_service.get_undo_snapshot() is None


@pytest.mark.asyncio
async def test_undo_once_restores_previous_config(store_service):
    await store_service.update_config(name="First")
    await store_service.update_config(name="Second")

    config, _ = await store_service.undo_config_change()

    assert config.name == "First"
    assert (await store_service.load()).config.name == "First"


@pytest.mark.asyncio
async def test_undo_twice_does_not_restore_original(store_service):
    original = (await store_service.load()).config
    await store_service.update_config(name="Changed")

    await store_service.undo_config_change()
    config, _ = await store_service.undo_config_change()

    assert config.name == "Changed"
    assert config != original


@pytest.mark.asyncio
async def test_undo_without_snapshot_returns_none(store_service):
    assert await store_service.undo_config_change() is None


@pytest.mark.asyncio
async def test_undo_does_not_overwrite_concurrent_config_change(
    store_service, mocker
):
    await store_service.update_config(name="Changed")
    read_entry = store_service.undo_ledger.get

    async def slow_get():
        entry = await read_entry()
        await asyncio.sleep(0)
        return entry

    mocker.patch.object(store_service.undo_ledger, "get", side_effect=slow_get)

    await asyncio.gather(
        store_service.undo_config_change(),
        store_service.update_config(name="Latest"),
    )

    config = (await store_service.load()).config
    assert config.name == "Latest"


@pytest.mark.asyncio
async def test_clear_undo_snapshot(store_service):
    await store_service.update_config(name="Changed")

    await store_service.clear_undo_snapshot()

    assert await store_service.get_undo_snapshot() is None
    assert await store_service.undo_config_change() is None


@pytest.mark.asyncio
async def test_set_config_replaces_whole_config(store_service):
    replacement = dataclasses.replace(
        seed.DEFAULT_CONFIG, name="New Place", entry_points=[]
    )

    config, _ = await store_service.set_config(replacement)

    assert config == replacement
    assert (await store_service.load()).config.entry_points == []
    assert (await store_service.get_undo_snapshot()).previous == seed.DEFAULT_CONFIG


@pytest.mark.asyncio
async def test_update_feedback_applies_patch(store_service):
    await store_service.update_feedback("fb_1", flagged=True)

    snapshot = await store_service.load()
    assert snapshot.find_feedback("fb_1").flagged is True


@pytest.mark.asyncio
async def test_update_feedback_unknown_id_is_a_no_op(store_service, broker):
    queue = await broker.subscribe()

    result = await store_service.update_feedback("missing", flagged=True)

    assert result.persisted is True
    assert queue.empty()


@pytest.mark.asyncio
async def test_mark_all_read_only_touches_new(store_service):
    await store_service.add_feedback(
        models.Feedback(
            rating_event_id="evt_x",
            stars=1,
            text="Bad",
            status=models.FeedbackStatus.REPLIED,
            reply="Sorry",
        )
    )

    await store_service.mark_all_read()

    snapshot = await store_service.load()
    statuses = {f.id: f.status for f in snapshot.feedbacks}
    assert statuses["fb_1"] == models.FeedbackStatus.READ
    assert models.FeedbackStatus.REPLIED in statuses.values()


@pytest.mark.asyncio
async def test_delete_feedback_removes_all_matching(store_service):
    extra = models.Feedback(rating_event_id="evt_x", stars=1, text="Bad")
    await store_service.add_feedback(extra)

    await store_service.delete_feedback([extra.id, "fb_1"])

    assert (await store_service.load()).feedbacks == []


@pytest.mark.asyncio
async def test_delete_missing_feedback_leaves_collection_unchanged(store_service):
    before = (await store_service.load()).feedbacks

    result = await store_service.delete_feedback(["does-not-exist"])

    assert result.persisted is True
    assert (await store_service.load()).feedbacks == before
