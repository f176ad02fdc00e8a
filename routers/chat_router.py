import logging

from fastapi import APIRouter, Depends, Request

from core.errors import InvalidRequest
from middleware.auth.auth_deps import principal_dependency
from schemas.chat_schema import ChatRequest, ChatResponse
from schemas.upload_schema import ErrorResponse
from services.chat_service import ChatGateway, answer_question, get_chat_gateway

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["chat"],
)


async def read_chat_request(request: Request) -> ChatRequest:
    """Decodes the JSON body; only called once the caller is authenticated."""
    try:
        return ChatRequest.model_validate(await request.json())
    except ValueError as e:
        logger.error(f"Invalid chat request body: {e}")
        raise InvalidRequest("Invalid request body")


@router.post(
    "/ai-chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    openapi_extra={"requestBody": {"content": {"application/json": {"schema": ChatRequest.model_json_schema()}}}},
)
async def ai_chat(
    request: Request,
    principal: principal_dependency,
    gateway: ChatGateway = Depends(get_chat_gateway),
):
    """Forwards a study question, with optional paper context and history, to the chat gateway."""
    chat_request = await read_chat_request(request)
    logger.info(f"Chat request from user {principal.id} ({len(chat_request.conversationHistory)} prior messages)")
    reply = await answer_question(chat_request, gateway)
    return ChatResponse(message=reply)
