import fastapi.testclient
import pytest

from reviewflow import config
from reviewflow.common import event_broker
from reviewflow.entrypoints.api import app
from reviewflow.rating import dependencies as rating_dependencies
from reviewflow.store import dependencies as store_dependencies
from reviewflow.store import repository, seed, service, undo


# Reset the global app config variable before each test
@pytest.fixture(autouse=True)
def reset_app_config():
    config.config = None
    yield
    config.config = None


@pytest.fixture(autouse=True)
def reset_singletons():
    store_dependencies.store_service = None
    store_dependencies.memory_repository = None
    rating_dependencies.session_repository = None
    event_broker._broker = None
    yield
    store_dependencies.store_service = None
    store_dependencies.memory_repository = None
    rating_dependencies.session_repository = None
    event_broker._broker = None


@pytest.fixture(autouse=True)
def set_test_env(monkeypatch):
    """Set environment variables for the test session."""
    monkeypatch.setenv("MONGO_URI", "mongodb://mongodb:27018/test_db")
    monkeypatch.setenv("PORT", "8000")
    monkeypatch.setenv("LOG_CONFIG", "logging.json")
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://reviews.example.com")
    monkeypatch.setenv("STORE_BACKEND", "memory")
    monkeypatch.setenv("RATING_SIMULATED_DELAY_MS", "0")
    monkeypatch.setenv("RATING_REDIRECT_CONFIRMATION_DELAY_MS", "0")


@pytest.fixture
def store_repository():
    return repository.InMemoryStoreRepository()


@pytest.fixture
def broker():
    return event_broker.EventBroker()


@pytest.fixture
def store_service(store_repository, broker):
    return service.StoreService(
        store_repository=store_repository,
        undo_ledger=undo.UndoLedger(store_repository),
        broker=broker,
    )


@pytest.fixture
def seeded_store(store_repository, store_service):
    """Store service whose repository already holds the default dataset."""
    store_repository.documents["state"] = repository.snapshot_to_doc(
        seed.default_snapshot()
    )
    return store_service


@pytest.fixture
def client(seeded_store):
    app.dependency_overrides[store_dependencies.get_store_service] = (
        lambda: seeded_store
    )

    test_client = fastapi.testclient.TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
