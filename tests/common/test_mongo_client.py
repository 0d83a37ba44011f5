import pytest

from reviewflow.common import mongo


# Reset the global client variable before each test
@pytest.fixture(autouse=True)
def reset_mongo_client():
    mongo.client = None
    mongo.db = None
    yield
    mongo.client = None
    mongo.db = None


@pytest.mark.asyncio
async def test_get_mongo_client_initialization(mocker):
    mock_client_cls = mocker.patch("reviewflow.common.mongo.pymongo.AsyncMongoClient")
    mock_instance = mock_client_cls.return_value

    mock_config = mocker.Mock()
    mock_config.mongo.uri = "mongodb://localhost:27017"
    mock_config.mongo.collection = "state"

    mock_db = mocker.MagicMock()
    mock_db.__getitem__.return_value.create_index = mocker.AsyncMock()
    mock_instance.get_database.return_value = mock_db
    mock_instance.admin.command = mocker.AsyncMock(return_value={"ok": 1})

    client = await mongo.get_mongo_client(app_config=mock_config)

    assert client == mock_instance
    mock_client_cls.assert_called_once_with(
        mock_config.mongo.uri, uuidRepresentation="standard", tz_aware=True
    )
    mock_instance.admin.command.assert_awaited_once_with("ping")


@pytest.mark.asyncio
async def test_get_mongo_client_returns_existing(mocker):
    existing_client = mocker.Mock()
    mongo.client = existing_client
    mock_config = mocker.Mock()

    mock_client_cls = mocker.patch("reviewflow.common.mongo.pymongo.AsyncMongoClient")

    result = await mongo.get_mongo_client(app_config=mock_config)

    assert result == existing_client
    mock_client_cls.assert_not_called()


@pytest.mark.asyncio
async def test_get_db_creates_unique_key_index(mocker):
    mock_client = mocker.MagicMock()
    mock_db = mocker.MagicMock()
    mock_collection = mocker.MagicMock()
    mock_collection.create_index = mocker.AsyncMock()
    mock_db.__getitem__.return_value = mock_collection
    mock_client.get_database.return_value = mock_db

    mock_config = mocker.Mock()
    mock_config.mongo.database = "test_db"
    mock_config.mongo.collection = "state"

    result = await mongo.get_db(client=mock_client, app_config=mock_config)
    assert result == mock_db
    assert mock_client.get_database.call_args[0][0] == "test_db"
    mock_db.__getitem__.assert_called_with("state")
    mock_collection.create_index.assert_awaited_once_with("key", unique=True)

    result2 = await mongo.get_db(client=mock_client, app_config=mock_config)
    assert result2 == mock_db
    assert mock_client.get_database.call_count == 1


@pytest.mark.asyncio
async def test_check_connection_failure(mocker):
    mock_client = mocker.MagicMock()
    mock_config = mocker.Mock()
    test_exception = Exception("Connection failed")
    mock_client.admin.command = mocker.AsyncMock(side_effect=test_exception)

    mock_get_db = mocker.patch(
        "reviewflow.common.mongo.get_db", new_callable=mocker.AsyncMock
    )

    with pytest.raises(Exception, match="Connection failed") as exc_info:
        await mongo.check_connection(mock_client, mock_config)

    assert exc_info.value == test_exception
    mock_get_db.assert_awaited_once_with(mock_client, mock_config)
