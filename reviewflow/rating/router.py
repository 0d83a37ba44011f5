import logging
import uuid

import fastapi

from reviewflow import config
from reviewflow import dependencies as app_dependencies
from reviewflow.rating import api_schemas, dependencies, models, repository, service
from reviewflow.store import api_schemas as store_schemas
from reviewflow.store import dependencies as store_dependencies
from reviewflow.store import models as store_models
from reviewflow.store import service as store_service

logger = logging.getLogger(__name__)

router = fastapi.APIRouter(prefix="/{slug}", tags=["customer"])


async def get_business_config(
    slug: str,
    store: store_service.StoreService = fastapi.Depends(
        store_dependencies.get_store_service
    ),
) -> store_models.BusinessConfig:
    snapshot = await store.load()
    if snapshot.config.slug != slug:
        msg = f"No business found for {slug!r}"
        raise store_models.NotFoundError(msg)
    return snapshot.config


async def get_flow(
    session_id: uuid.UUID,
    _: store_models.BusinessConfig = fastapi.Depends(get_business_config),
    sessions: repository.AbstractRatingSessionRepository = fastapi.Depends(
        dependencies.get_rating_session_repository
    ),
) -> service.RatingFlow:
    flow = await sessions.get(session_id)
    if flow is None:
        msg = f"Rating session {session_id} not found"
        raise models.SessionNotFoundError(msg)
    return flow


def session_response(flow: service.RatingFlow) -> api_schemas.RatingSessionResponse:
    redirect = None
    if flow.redirect is not None:
        redirect = api_schemas.RedirectSchema(
            url=flow.redirect.url, delay_ms=flow.redirect.delay_ms
        )
    return api_schemas.RatingSessionResponse(
        session_id=flow.id,
        step=flow.step,
        stars=flow.stars,
        source=flow.source,
        event_id=flow.event_id,
        feedback_id=flow.feedback_id,
        answers=flow.answers,
        redirect=redirect,
        warning=flow.last_write.warning if flow.last_write else None,
    )


@router.get("", response_model=api_schemas.PublicProfileResponse)
async def get_profile(
    business: store_models.BusinessConfig = fastapi.Depends(get_business_config),
):
    return api_schemas.PublicProfileResponse(
        name=business.name,
        slug=business.slug,
        logo_url=business.logo_url,
        theme=store_schemas.ThemeSchema.model_validate(business.resolved_theme()),
        feedback_questions=[
            store_schemas.FeedbackQuestionSchema.model_validate(question)
            for question in business.feedback_questions
        ],
    )


@router.post(
    "/ratings",
    response_model=api_schemas.RatingSessionResponse,
    status_code=201,
    dependencies=[fastapi.Depends(get_business_config)],
)
async def submit_rating(
    request: api_schemas.RatingRequest,
    src: str | None = None,
    create_flow=fastapi.Depends(dependencies.get_rating_flow_factory),
    sessions: repository.AbstractRatingSessionRepository = fastapi.Depends(
        dependencies.get_rating_session_repository
    ),
):
    flow = create_flow(src)
    await sessions.save(flow)
    await flow.select_rating(request.stars)
    return session_response(flow)


@router.get(
    "/sessions/{session_id}", response_model=api_schemas.RatingSessionResponse
)
async def get_session(flow: service.RatingFlow = fastapi.Depends(get_flow)):
    return session_response(flow)


@router.put(
    "/sessions/{session_id}/stars", response_model=api_schemas.RatingSessionResponse
)
async def change_rating(
    request: api_schemas.RatingRequest,
    flow: service.RatingFlow = fastapi.Depends(get_flow),
):
    await flow.change_rating(request.stars)
    return session_response(flow)


@router.post(
    "/sessions/{session_id}/answers",
    response_model=api_schemas.RatingSessionResponse,
)
async def toggle_answer(
    request: api_schemas.AnswerToggleRequest,
    flow: service.RatingFlow = fastapi.Depends(get_flow),
):
    await flow.toggle_answer(request.question_id, request.option)
    return session_response(flow)


@router.post(
    "/sessions/{session_id}/feedback",
    response_model=api_schemas.RatingSessionResponse,
    status_code=201,
)
async def submit_feedback(
    request: api_schemas.FeedbackSubmitRequest,
    flow: service.RatingFlow = fastapi.Depends(get_flow),
):
    await flow.submit_feedback(
        text=request.text,
        customer_name=request.customer_name,
        customer_email=request.customer_email,
    )
    return session_response(flow)


@router.get("/exit", response_model=api_schemas.ExitResponse)
async def exit_url(
    business: store_models.BusinessConfig = fastapi.Depends(get_business_config),
    app_config: config.AppConfig = fastapi.Depends(app_dependencies.get_app_config),
):
    return api_schemas.ExitResponse(
        url=service.resolve_exit_url(business, app_config.store)
    )
