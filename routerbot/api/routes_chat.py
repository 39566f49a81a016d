import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from pydantic import BaseModel

from routerbot.chat.exchange import ChatExchangeHandler
from routerbot.conversation.models import Message
from routerbot.errors import UpstreamError
from routerbot.api.deps import get_handler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

CONVERSATION_HEADER = "X-Conversation-Id"

_NON_POST = ["GET", "PUT", "PATCH", "DELETE"]


class ChatRequest(BaseModel):
    messages: list[Message]


def _error(error: str, details) -> JSONResponse:
    return JSONResponse({"error": error, "details": details}, status_code=500)


async def _parse_body(request: Request) -> ChatRequest:
    # Parsed by hand so that a malformed body takes the same 500 path as
    # every other failure instead of FastAPI's 422.
    return ChatRequest.model_validate(await request.json())


@router.post("/chat")
async def chat(
    request: Request,
    conversationId: Optional[str] = None,
    handler: ChatExchangeHandler = Depends(get_handler),
):
    """Tool-enabled exchange streamed as plain text."""
    try:
        body = await _parse_body(request)
        try:
            exchange = await handler.stream(body.messages, conversationId)
        except UpstreamError as e:
            return _error("OpenAI API Error", e.message)

        return StreamingResponse(
            exchange.tokens(),
            media_type="text/plain; charset=utf-8",
            headers={
                CONVERSATION_HEADER: exchange.conversation_id,
                "Cache-Control": "no-cache",
                "X-Accel-Buffering": "no",
            },
        )
    except Exception as e:
        logger.error("Chat API error: %s", e, exc_info=True)
        return _error("Internal Server Error", str(e))


@router.post("/direct-chat")
async def direct_chat(
    request: Request,
    conversationId: Optional[str] = None,
    handler: ChatExchangeHandler = Depends(get_handler),
):
    """Non-streamed exchange without tools."""
    try:
        body = await _parse_body(request)
        try:
            result = await handler.direct(body.messages, conversationId)
        except UpstreamError as e:
            return _error("OpenAI API Error", e.message)

        return JSONResponse(
            {
                "message": result.message.model_dump(exclude_none=True),
                "conversationId": result.conversation_id,
            },
            headers={CONVERSATION_HEADER: result.conversation_id},
        )
    except Exception as e:
        logger.error("Chat API error: %s", e, exc_info=True)
        return _error("Internal Server Error", str(e))


@router.api_route("/chat", methods=_NON_POST, include_in_schema=False)
@router.api_route("/direct-chat", methods=_NON_POST, include_in_schema=False)
async def method_not_allowed():
    return PlainTextResponse("Method not allowed", status_code=405)
