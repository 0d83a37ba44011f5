import asyncio
import json
import logging

import fastapi
import fastapi.responses

from reviewflow.store import api_schemas, dependencies, models, service

logger = logging.getLogger(__name__)

router = fastapi.APIRouter(prefix="/admin", tags=["admin"])

KEEPALIVE_SECONDS = 15


def to_domain_config(
    schema: api_schemas.BusinessConfigSchema,
) -> models.BusinessConfig:
    return models.BusinessConfig(
        id=schema.id,
        name=schema.name,
        slug=schema.slug,
        min_star_threshold=schema.min_star_threshold,
        google_place_url=schema.google_place_url,
        redirect_url=schema.redirect_url,
        logo_url=schema.logo_url,
        brand_color=schema.brand_color,
        theme=models.Theme(**schema.theme.model_dump()),
        entry_points=[
            models.EntryPoint(**ep.model_dump()) for ep in schema.entry_points
        ],
        feedback_questions=[
            models.FeedbackQuestion(**question.model_dump())
            for question in schema.feedback_questions
        ],
    )


def to_config_changes(request: api_schemas.ConfigUpdateRequest) -> dict:
    changes = request.model_dump(
        exclude_unset=True, exclude={"theme", "feedback_questions"}
    )
    if request.theme is not None:
        changes["theme"] = models.Theme(**request.theme.model_dump())
    if request.feedback_questions is not None:
        changes["feedback_questions"] = [
            models.FeedbackQuestion(**question.model_dump())
            for question in request.feedback_questions
        ]
    return changes


def config_response(
    config: models.BusinessConfig, result: models.WriteResult
) -> api_schemas.ConfigResponse:
    return api_schemas.ConfigResponse(
        config=api_schemas.BusinessConfigSchema.model_validate(config),
        persisted=result.persisted,
        warning=result.warning,
    )


@router.get("/state", response_model=api_schemas.StateResponse)
async def get_state(
    store: service.StoreService = fastapi.Depends(dependencies.get_store_service),
):
    snapshot = await store.load()
    return api_schemas.StateResponse.model_validate(snapshot)


@router.get("/config", response_model=api_schemas.BusinessConfigSchema)
async def get_config(
    store: service.StoreService = fastapi.Depends(dependencies.get_store_service),
):
    snapshot = await store.load()
    return api_schemas.BusinessConfigSchema.model_validate(snapshot.config)


@router.patch("/config", response_model=api_schemas.ConfigResponse)
async def update_config(
    request: api_schemas.ConfigUpdateRequest,
    store: service.StoreService = fastapi.Depends(dependencies.get_store_service),
):
    config, result = await store.update_config(**to_config_changes(request))
    return config_response(config, result)


@router.put("/config", response_model=api_schemas.ConfigResponse)
async def set_config(
    request: api_schemas.BusinessConfigSchema,
    store: service.StoreService = fastapi.Depends(dependencies.get_store_service),
):
    config, result = await store.set_config(to_domain_config(request))
    return config_response(config, result)


@router.get("/config/undo", response_model=api_schemas.UndoSnapshotResponse)
async def get_undo_snapshot(
    store: service.StoreService = fastapi.Depends(dependencies.get_store_service),
):
    entry = await store.get_undo_snapshot()
    if entry is None:
        raise fastapi.HTTPException(status_code=404, detail="Nothing to undo.")

    return api_schemas.UndoSnapshotResponse(
        type=entry.kind,
        prev=api_schemas.BusinessConfigSchema.model_validate(entry.previous),
        ts=entry.timestamp,
    )


@router.post("/config/undo", response_model=api_schemas.ConfigResponse)
async def undo_config_change(
    store: service.StoreService = fastapi.Depends(dependencies.get_store_service),
):
    reverted = await store.undo_config_change()
    if reverted is None:
        raise fastapi.HTTPException(status_code=404, detail="Nothing to undo.")

    config, result = reverted
    return config_response(config, result)


@router.delete("/config/undo", response_model=api_schemas.WriteResponse)
async def clear_undo_snapshot(
    store: service.StoreService = fastapi.Depends(dependencies.get_store_service),
):
    result = await store.clear_undo_snapshot()
    return api_schemas.WriteResponse(persisted=result.persisted, warning=result.warning)


@router.get("/events")
async def stream_changes(
    request: fastapi.Request,
    store: service.StoreService = fastapi.Depends(dependencies.get_store_service),
):
    """Server-Sent Events stream of store change notifications."""
    queue = await store.subscribe()

    async def event_stream():
        try:
            while not await request.is_disconnected():
                try:
                    event = await asyncio.wait_for(queue.get(), KEEPALIVE_SECONDS)
                except TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                yield f"event: {event['type']}\ndata: {json.dumps(event)}\n\n"
        finally:
            await store.unsubscribe(queue)

    return fastapi.responses.StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )
