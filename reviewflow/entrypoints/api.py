import asyncio
import contextlib
import logging

import fastapi
import fastapi.encoders
import fastapi.exceptions
import fastapi.responses
import uvicorn

from reviewflow import config
from reviewflow.common import mongo
from reviewflow.dashboard import router as dashboard_router
from reviewflow.entry_points import router as entry_points_router
from reviewflow.feedback import router as feedback_router
from reviewflow.health import router as health_router
from reviewflow.rating import models as rating_models
from reviewflow.rating import router as rating_router
from reviewflow.store import models as store_models
from reviewflow.store import router as store_router

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(_: fastapi.FastAPI):
    app_config = config.get_config()
    client = None
    if app_config.store.backend == "mongo":
        client = await mongo.get_mongo_client(app_config)
        logger.info("MongoDB client connected")

    yield

    if client:
        await asyncio.shield(client.close())
        logger.info("MongoDB client closed")


app = fastapi.FastAPI(
    title="ReviewFlow",
    description="Routes star ratings to public reviews or internal feedback",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(fastapi.exceptions.RequestValidationError)
async def validation_exception_handler(
    _: fastapi.Request, exc: fastapi.exceptions.RequestValidationError
):
    return fastapi.responses.JSONResponse(
        status_code=400,
        content={"detail": fastapi.encoders.jsonable_encoder(exc.errors())},
    )


@app.exception_handler(store_models.ValidationError)
async def domain_validation_exception_handler(
    _: fastapi.Request, exc: store_models.ValidationError
):
    logger.warning("Rejected request", extra={"error": str(exc)})
    return fastapi.responses.JSONResponse(
        status_code=400,
        content={"detail": str(exc)},
    )


@app.exception_handler(store_models.NotFoundError)
@app.exception_handler(rating_models.SessionNotFoundError)
async def not_found_exception_handler(_: fastapi.Request, exc: Exception):
    return fastapi.responses.JSONResponse(
        status_code=404,
        content={"detail": str(exc)},
    )


@app.exception_handler(rating_models.InvalidTransitionError)
async def invalid_transition_exception_handler(
    _: fastapi.Request, exc: rating_models.InvalidTransitionError
):
    return fastapi.responses.JSONResponse(
        status_code=409,
        content={"detail": str(exc)},
    )


app.include_router(health_router.router)
app.include_router(store_router.router)
app.include_router(dashboard_router.router)
app.include_router(feedback_router.router)
app.include_router(entry_points_router.router)
# Customer routes match any first path segment, so they go last.
app.include_router(rating_router.router)


def main() -> None:  # pragma: no cover
    app_config = config.get_config()
    uvicorn.run(
        "reviewflow.entrypoints.api:app",
        host=app_config.host,
        port=app_config.port,
        log_config=app_config.log_config,
        reload=app_config.python_env == "development",
    )


if __name__ == "__main__":  # pragma: no cover
    main()
