"""Synchronous refinement of draft text for chat participants."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from chat_companion.api.auth import get_current_user_id
from chat_companion.api.dependencies import get_pipeline
from chat_companion.core.base import ErrorLevel, ResourceErrorDetails, ValidationErrorDetails
from chat_companion.core.decorators import with_error_handling
from chat_companion.core.errors import AuthorizationError, InvalidRequestError
from chat_companion.core.logging import get_logger
from chat_companion.services.pipeline import ChatPipeline

logger = get_logger(__name__)

router = APIRouter()


class RefinementRequest(BaseModel):
    chat_id: str | None = None
    text: str | None = None


class RefinementResponse(BaseModel):
    refined_message: str | None


def _require(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise InvalidRequestError(
            f"'{field}' is required",
            details=ValidationErrorDetails(
                source="api.refinement",
                operation="validate",
                field=field,
                actual_value=value,
                constraint="non-empty string",
            ),
        )
    return value


@router.post("", response_model=RefinementResponse)
@with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
async def refine_draft(
    request: RefinementRequest,
    user_id: str = Depends(get_current_user_id),
    pipeline: ChatPipeline = Depends(get_pipeline),
) -> RefinementResponse:
    """Refine draft text for a chat the caller participates in."""
    chat_id = _require(request.chat_id, "chat_id")
    text = _require(request.text, "text")

    chat = await pipeline.chats.get(chat_id)
    if chat is None or not chat.has_participant(user_id):
        raise AuthorizationError(
            "unauthorized",
            details=ResourceErrorDetails(
                source="api.refinement",
                operation="refine_draft",
                resource_id=chat_id,
                resource_type="chat",
                action="refine",
                user_id=user_id,
            ),
        )

    refined = await pipeline.refinement.refine(chat_id, text)
    logger.info("Draft refined", extra={"chat_id": chat_id, "produced": refined is not None})
    return RefinementResponse(refined_message=refined)
