import logging

import fastapi

from reviewflow import config
from reviewflow import dependencies as app_dependencies
from reviewflow.entry_points import api_schemas, dependencies, service
from reviewflow.store import api_schemas as store_schemas
from reviewflow.store import models

logger = logging.getLogger(__name__)

router = fastapi.APIRouter(prefix="/admin/entry-points", tags=["entry-points"])


async def _save(
    registry: service.EntryPointRegistry,
    app_config: config.AppConfig,
    request: api_schemas.EntryPointRequest,
    entry_point_id: str | None = None,
) -> api_schemas.EntryPointWriteResponse:
    entry_point, result = await registry.upsert(
        label=request.label, src=request.src, entry_point_id=entry_point_id
    )
    snapshot = await registry.store.load()
    return api_schemas.EntryPointWriteResponse(
        entry_point=to_response(
            entry_point, app_config.public_base_url, snapshot.config.slug
        ),
        persisted=result.persisted,
        warning=result.warning,
    )


def to_response(
    entry_point: models.EntryPoint, base_url: str, slug: str
) -> api_schemas.EntryPointResponse:
    return api_schemas.EntryPointResponse(
        id=entry_point.id,
        label=entry_point.label,
        src=entry_point.src,
        link=service.build_customer_link(base_url, slug, entry_point.src),
    )


@router.get("", response_model=list[api_schemas.EntryPointResponse])
async def list_entry_points(
    registry: service.EntryPointRegistry = fastapi.Depends(
        dependencies.get_entry_point_registry
    ),
    app_config: config.AppConfig = fastapi.Depends(app_dependencies.get_app_config),
):
    links = await registry.links(app_config.public_base_url)
    return [
        api_schemas.EntryPointResponse(
            id=ep.id, label=ep.label, src=ep.src, link=link
        )
        for ep, link in links
    ]


@router.post(
    "", response_model=api_schemas.EntryPointWriteResponse, status_code=201
)
async def create_entry_point(
    request: api_schemas.EntryPointRequest,
    registry: service.EntryPointRegistry = fastapi.Depends(
        dependencies.get_entry_point_registry
    ),
    app_config: config.AppConfig = fastapi.Depends(app_dependencies.get_app_config),
):
    return await _save(registry, app_config, request)


@router.put("/{entry_point_id}", response_model=api_schemas.EntryPointWriteResponse)
async def upsert_entry_point(
    entry_point_id: str,
    request: api_schemas.EntryPointRequest,
    registry: service.EntryPointRegistry = fastapi.Depends(
        dependencies.get_entry_point_registry
    ),
    app_config: config.AppConfig = fastapi.Depends(app_dependencies.get_app_config),
):
    return await _save(registry, app_config, request, entry_point_id=entry_point_id)


@router.delete("/{entry_point_id}", response_model=store_schemas.WriteResponse)
async def delete_entry_point(
    entry_point_id: str,
    registry: service.EntryPointRegistry = fastapi.Depends(
        dependencies.get_entry_point_registry
    ),
):
    result = await registry.delete(entry_point_id)
    return store_schemas.WriteResponse(
        persisted=result.persisted, warning=result.warning
    )
