import pytest

from reviewflow import config
from reviewflow.rating import repository, service


@pytest.fixture
def make_flow(store_service):
    def _make_flow():
        return service.RatingFlow(
            store=store_service, settings=config.get_config().store
        )

    return _make_flow


@pytest.mark.asyncio
async def test_save_and_get(make_flow):
    sessions = repository.InMemoryRatingSessionRepository()
    flow = make_flow()

    await sessions.save(flow)

    assert await sessions.get(flow.id) is flow


@pytest.mark.asyncio
async def test_oldest_session_is_evicted(make_flow):
    sessions = repository.InMemoryRatingSessionRepository(max_sessions=2)
    first, second, third = make_flow(), make_flow(), make_flow()

    for flow in (first, second, third):
        await sessions.save(flow)

    assert await sessions.get(first.id) is None
    assert await sessions.get(second.id) is second
    assert await sessions.get(third.id) is third
