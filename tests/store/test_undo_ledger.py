import pytest

from reviewflow.store import models, repository, seed, undo


@pytest.mark.asyncio
async def test_record_overwrites_previous_entry():
    ledger = undo.UndoLedger(repository.InMemoryStoreRepository())
    first = seed.DEFAULT_CONFIG
    second = models.BusinessConfig(
        id="biz_2", name="Other", slug="other", min_star_threshold=3
    )

    await ledger.record(first)
    await ledger.record(second)

    entry = await ledger.get()
    assert entry.previous == second


@pytest.mark.asyncio
async def test_get_returns_none_when_storage_unavailable(mocker):
    repo = mocker.AsyncMock(spec=repository.AbstractStoreRepository)
    repo.read_undo.side_effect = models.StorageUnavailableError("offline")

    assert await undo.UndoLedger(repo).get() is None


@pytest.mark.asyncio
async def test_record_reports_failure_without_raising(mocker):
    repo = mocker.AsyncMock(spec=repository.AbstractStoreRepository)
    repo.write_undo.side_effect = models.StorageUnavailableError("offline")

    result = await undo.UndoLedger(repo).record(seed.DEFAULT_CONFIG)

    assert result.persisted is False
    assert result.warning
