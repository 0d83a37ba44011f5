import logging
from typing import Literal

import pydantic
import pydantic_settings

logger = logging.getLogger(__name__)


class MongoConfig(pydantic_settings.BaseSettings):
    model_config = pydantic_settings.SettingsConfigDict(env_file=".env", extra="ignore")
    uri: str = pydantic.Field(..., alias="MONGO_URI")
    database: str = pydantic.Field(default="reviewflow", alias="MONGO_DATABASE")
    collection: str = pydantic.Field(default="state", alias="MONGO_COLLECTION")


class StoreConfig(pydantic_settings.BaseSettings):
    model_config = pydantic_settings.SettingsConfigDict(env_file=".env", extra="ignore")
    backend: Literal["mongo", "memory"] = pydantic.Field(
        default="mongo", alias="STORE_BACKEND"
    )
    state_key: str = pydantic.Field(default="reviewflow_db_v1", alias="STORE_STATE_KEY")
    undo_key: str = pydantic.Field(default="reviewflow_undo_v1", alias="STORE_UNDO_KEY")
    simulated_delay_ms: int = pydantic.Field(
        default=600, ge=0, alias="RATING_SIMULATED_DELAY_MS"
    )
    redirect_confirmation_delay_ms: int = pydantic.Field(
        default=1000, ge=0, alias="RATING_REDIRECT_CONFIRMATION_DELAY_MS"
    )
    default_source: str = pydantic.Field(default="web", alias="RATING_DEFAULT_SOURCE")
    fallback_exit_url: str = pydantic.Field(
        default="/", alias="RATING_FALLBACK_EXIT_URL"
    )


class AppConfig(pydantic_settings.BaseSettings):
    model_config = pydantic_settings.SettingsConfigDict(env_file=".env", extra="ignore")
    python_env: str = "production"
    host: str | None = None
    port: int = pydantic.Field(...)
    log_config: str = pydantic.Field(...)
    public_base_url: str = "http://localhost:8000"

    mongo: MongoConfig = pydantic.Field(default_factory=MongoConfig)
    store: StoreConfig = pydantic.Field(default_factory=StoreConfig)


config: AppConfig | None = None


def get_config() -> AppConfig:
    global config
    if config is None:
        try:
            config = AppConfig()
        except pydantic.ValidationError as e:
            error_details = [
                {
                    "field": ".".join(str(loc) for loc in error["loc"]),
                    "type": error["type"],
                    "message": error["msg"],
                    "url": error.get("url"),
                }
                for error in e.errors()
            ]

            logger.error("Config validation failed with errors: %s", error_details)

            msg = "Invalid application configuration"
            raise RuntimeError(msg) from None

    return config
