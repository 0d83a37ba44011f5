import logging
from typing import Any

import bson.binary
import bson.codec_options
import fastapi
import pymongo
import pymongo.asynchronous.database

from reviewflow import config, dependencies

logger = logging.getLogger(__name__)

client: pymongo.AsyncMongoClient | None = None
db: pymongo.asynchronous.database.AsyncDatabase | None = None


async def get_mongo_client(
    app_config: config.AppConfig = fastapi.Depends(dependencies.get_app_config),
) -> pymongo.AsyncMongoClient:
    global client
    if client is None:
        logger.info("Creating MongoDB client")
        client = pymongo.AsyncMongoClient(
            app_config.mongo.uri, uuidRepresentation="standard", tz_aware=True
        )

        logger.info("Testing MongoDB connection to %s", app_config.mongo.database)
        await check_connection(client, app_config)
    return client


async def get_db(
    client: pymongo.AsyncMongoClient = fastapi.Depends(get_mongo_client),
    app_config: config.AppConfig = fastapi.Depends(dependencies.get_app_config),
) -> pymongo.asynchronous.database.AsyncDatabase:
    global db
    if db is None:
        codec_options: bson.codec_options.CodecOptions[dict[str, Any]] = (
            bson.codec_options.CodecOptions(
                tz_aware=True,
                uuid_representation=bson.binary.UuidRepresentation.STANDARD,
            )
        )

        db = client.get_database(app_config.mongo.database, codec_options=codec_options)

        await _ensure_indexes(db, app_config)
    return db


async def check_connection(
    client: pymongo.AsyncMongoClient, app_config: config.AppConfig
):
    await get_db(client, app_config)
    try:
        await client.admin.command("ping")
        logger.info("MongoDB connection successful")
    except Exception as e:
        logger.error("MongoDB connection failed: %s", e)
        raise e


async def _ensure_indexes(
    db: pymongo.asynchronous.database.AsyncDatabase, app_config: config.AppConfig
):
    """Ensure the state records are unique by key."""
    logger.info("Ensuring MongoDB indexes are present")

    await db[app_config.mongo.collection].create_index("key", unique=True)

    logger.info("MongoDB indexes ensured")
