import logging

import fastapi

from reviewflow.feedback import api_schemas, dependencies, service
from reviewflow.store import api_schemas as store_schemas
from reviewflow.store import models

logger = logging.getLogger(__name__)

router = fastapi.APIRouter(prefix="/admin/feedback", tags=["feedback"])


def write_response(result: models.WriteResult) -> store_schemas.WriteResponse:
    return store_schemas.WriteResponse(
        persisted=result.persisted, warning=result.warning
    )


@router.get("", response_model=list[store_schemas.FeedbackSchema])
async def list_feedback(
    status: models.FeedbackStatus | None = None,
    flagged: bool | None = None,
    feedback_service: service.FeedbackService = fastapi.Depends(
        dependencies.get_feedback_service
    ),
):
    feedbacks = await feedback_service.list_feedback(status=status, flagged=flagged)
    return [store_schemas.FeedbackSchema.model_validate(f) for f in feedbacks]


@router.post("/read-all", response_model=store_schemas.WriteResponse)
async def mark_all_read(
    feedback_service: service.FeedbackService = fastapi.Depends(
        dependencies.get_feedback_service
    ),
):
    return write_response(await feedback_service.mark_all_read())


@router.post("/delete", response_model=store_schemas.WriteResponse)
async def delete_feedback(
    request: api_schemas.DeleteFeedbackRequest,
    feedback_service: service.FeedbackService = fastapi.Depends(
        dependencies.get_feedback_service
    ),
):
    return write_response(await feedback_service.delete(request.ids))


@router.get("/{feedback_id}", response_model=store_schemas.FeedbackSchema)
async def get_feedback(
    feedback_id: str,
    feedback_service: service.FeedbackService = fastapi.Depends(
        dependencies.get_feedback_service
    ),
):
    feedback = await feedback_service.get_feedback(feedback_id)
    if feedback is None:
        raise fastapi.HTTPException(status_code=404, detail="Feedback not found.")
    return store_schemas.FeedbackSchema.model_validate(feedback)


@router.patch("/{feedback_id}", response_model=store_schemas.WriteResponse)
async def update_feedback(
    feedback_id: str,
    request: api_schemas.FeedbackUpdateRequest,
    feedback_service: service.FeedbackService = fastapi.Depends(
        dependencies.get_feedback_service
    ),
):
    result = await feedback_service.update_feedback(
        feedback_id, status=request.status, flagged=request.flagged
    )
    return write_response(result)


@router.post("/{feedback_id}/read", response_model=store_schemas.WriteResponse)
async def mark_read(
    feedback_id: str,
    feedback_service: service.FeedbackService = fastapi.Depends(
        dependencies.get_feedback_service
    ),
):
    return write_response(await feedback_service.mark_read([feedback_id]))


@router.post("/{feedback_id}/flag", response_model=store_schemas.WriteResponse)
async def toggle_flag(
    feedback_id: str,
    feedback_service: service.FeedbackService = fastapi.Depends(
        dependencies.get_feedback_service
    ),
):
    return write_response(await feedback_service.toggle_flag(feedback_id))


@router.post("/{feedback_id}/reply", response_model=store_schemas.WriteResponse)
async def reply_to_feedback(
    feedback_id: str,
    request: api_schemas.ReplyRequest,
    feedback_service: service.FeedbackService = fastapi.Depends(
        dependencies.get_feedback_service
    ),
):
    result = await feedback_service.reply_to_feedback(feedback_id, request.reply)
    return write_response(result)


@router.delete("/{feedback_id}", response_model=store_schemas.WriteResponse)
async def delete_one(
    feedback_id: str,
    feedback_service: service.FeedbackService = fastapi.Depends(
        dependencies.get_feedback_service
    ),
):
    return write_response(await feedback_service.delete([feedback_id]))
