"""Chat API routes."""

import logging
from typing import AsyncIterator
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from app.api.dependencies import get_chat_service, get_current_user
from app.api.v1.threads import store_failure
from app.exceptions import GenerationError, StoreError
from app.models.user import UserProfile
from app.schemas.messages import ChatRequest
from app.services.chat_service import ChatService, ChatTurn

logger = logging.getLogger(__name__)
router = APIRouter(tags=["chat"])


@router.post("", status_code=status.HTTP_200_OK)
async def chat_endpoint(
    request: ChatRequest,
    user: UserProfile = Depends(get_current_user),
    chat_service: ChatService = Depends(get_chat_service),
) -> StreamingResponse:
    """
    Stream the assistant's reply to one user message as plain text.

    The thread id (new or existing) is returned in the ``X-Thread-Id`` header;
    the exchange is stored once the stream completes.
    """
    if not chat_service.llm_client.settings.api_key:
        logger.error("OPEN_ROUTER_API_KEY environment variable is not set")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="OPEN_ROUTER_API_KEY environment variable is not set. Please check your .env file.",
        )

    try:
        turn = await chat_service.start_turn(
            user.id, request.thread_id, request.message, request.system_prompt
        )
    except StoreError as e:
        raise store_failure("start chat turn", e)

    async def reply_stream(turn: ChatTurn) -> AsyncIterator[str]:
        # headers are already sent here, so failures can only end the stream
        try:
            async for chunk in chat_service.stream_reply(turn):
                yield chunk
        except GenerationError as e:
            logger.error(f"Reply generation failed in thread {turn.thread_id}: {str(e)}", exc_info=True)
        except StoreError as e:
            logger.error(f"Reply could not be stored in thread {turn.thread_id}: {str(e)}", exc_info=True)

    return StreamingResponse(
        reply_stream(turn),
        media_type="text/plain; charset=utf-8",
        headers={"X-Thread-Id": turn.thread_id},
    )
