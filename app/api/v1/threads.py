"""Thread API routes."""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import (
    get_current_user,
    get_label_service,
    get_message_service,
    get_reconciliation_service,
    get_thread_service,
)
from app.exceptions import StoreError, ThreadNotFoundError
from app.models.thread import Thread
from app.models.user import UserProfile
from app.schemas.messages import FirstExchangeCreate, MessageCreate, MessageResponse
from app.schemas.threads import (
    ReconcileResponse,
    ThreadCreateResponse,
    ThreadResponse,
    ThreadUpdate,
    TitleRequest,
    TitleResponse,
)
from app.services.label_service import LabelService
from app.services.message_service import MessageService
from app.services.reconciliation_service import ReconciliationService
from app.services.thread_service import ThreadService, filter_threads

logger = logging.getLogger(__name__)
router = APIRouter(tags=["threads"])


def store_failure(action: str, error: StoreError) -> HTTPException:
    """Map a store error to the HTTP error the client sees."""
    if isinstance(error, ThreadNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Thread not found")
    logger.error(f"Store error while trying to {action}: {str(error)}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {str(error)}",
    )


def to_response(thread: Thread) -> ThreadResponse:
    return ThreadResponse(**thread.model_dump())


async def require_thread(thread_service: ThreadService, thread_id: str, user: UserProfile) -> Thread:
    thread = await thread_service.get_thread(thread_id, user.id)
    if thread is None:
        logger.warning(f"Thread {thread_id} not found for user {user.id}")
        raise ThreadNotFoundError(thread_id)
    return thread


@router.get("", response_model=List[ThreadResponse], status_code=status.HTTP_200_OK)
async def list_threads_endpoint(
    q: Optional[str] = Query(None, description="Filter on label or last message"),
    reconcile: bool = Query(False, description="Backfill labels before listing"),
    user: UserProfile = Depends(get_current_user),
    thread_service: ThreadService = Depends(get_thread_service),
    reconciliation_service: ReconciliationService = Depends(get_reconciliation_service),
) -> List[ThreadResponse]:
    """
    List the user's threads, newest first.

    Label reconciliation only runs when ``reconcile`` is set, so a plain
    listing never writes.
    """
    try:
        if reconcile:
            await reconciliation_service.reconcile_labels(user.id)
        threads = await thread_service.list_threads(user.id)
    except StoreError as e:
        raise store_failure("list threads", e)

    threads = filter_threads(threads, q)
    logger.info(f"Returning {len(threads)} threads for user {user.id}")
    return [to_response(thread) for thread in threads]


@router.post("", response_model=ThreadCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_thread_endpoint(
    user: UserProfile = Depends(get_current_user),
    thread_service: ThreadService = Depends(get_thread_service),
) -> ThreadCreateResponse:
    """Start an empty "New Thread"."""
    try:
        thread_id = await thread_service.create_empty_thread(user.id)
    except StoreError as e:
        raise store_failure("create thread", e)
    return ThreadCreateResponse(id=thread_id)


@router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile_labels_endpoint(
    user: UserProfile = Depends(get_current_user),
    reconciliation_service: ReconciliationService = Depends(get_reconciliation_service),
) -> ReconcileResponse:
    """Backfill thread labels from each thread's first reply."""
    try:
        updated = await reconciliation_service.reconcile_labels(user.id)
    except StoreError as e:
        raise store_failure("reconcile labels", e)
    return ReconcileResponse(updated=updated)


@router.post("/generate-title", response_model=TitleResponse)
async def generate_title_endpoint(
    request: TitleRequest,
    user: UserProfile = Depends(get_current_user),
    label_service: LabelService = Depends(get_label_service),
) -> TitleResponse:
    """Short title for an exchange; degrades to a truncated message, never fails."""
    title = await label_service.generate_label(request.user_message, request.ai_response)
    return TitleResponse(title=title)


@router.get("/{thread_id}", response_model=ThreadResponse)
async def get_thread_endpoint(
    thread_id: str,
    user: UserProfile = Depends(get_current_user),
    thread_service: ThreadService = Depends(get_thread_service),
) -> ThreadResponse:
    try:
        thread = await require_thread(thread_service, thread_id, user)
    except StoreError as e:
        raise store_failure("get thread", e)
    return to_response(thread)


@router.patch("/{thread_id}", response_model=ThreadResponse)
async def update_thread_endpoint(
    thread_id: str,
    update: ThreadUpdate,
    user: UserProfile = Depends(get_current_user),
    thread_service: ThreadService = Depends(get_thread_service),
) -> ThreadResponse:
    """Update title, label or preview of a thread."""
    try:
        await require_thread(thread_service, thread_id, user)
        await thread_service.update_thread_meta(thread_id, **update.model_dump(exclude_none=True))
        thread = await require_thread(thread_service, thread_id, user)
    except StoreError as e:
        raise store_failure("update thread", e)
    return to_response(thread)


@router.get("/{thread_id}/messages", response_model=List[MessageResponse])
async def list_messages_endpoint(
    thread_id: str,
    user: UserProfile = Depends(get_current_user),
    thread_service: ThreadService = Depends(get_thread_service),
    message_service: MessageService = Depends(get_message_service),
) -> List[MessageResponse]:
    """Stored messages in conversation order; the system prompt is not included."""
    try:
        await require_thread(thread_service, thread_id, user)
        messages = await message_service.list_messages(thread_id)
    except StoreError as e:
        raise store_failure("list messages", e)
    return [MessageResponse(**message.model_dump()) for message in messages]


@router.post("/{thread_id}/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def append_message_endpoint(
    thread_id: str,
    message: MessageCreate,
    user: UserProfile = Depends(get_current_user),
    thread_service: ThreadService = Depends(get_thread_service),
    message_service: MessageService = Depends(get_message_service),
) -> MessageResponse:
    try:
        await require_thread(thread_service, thread_id, user)
        stored = await message_service.append_message(thread_id, message.role, message.content)
    except StoreError as e:
        raise store_failure("append message", e)
    return MessageResponse(**stored.model_dump())


@router.post("/{thread_id}/first-exchange", status_code=status.HTTP_204_NO_CONTENT)
async def append_first_exchange_endpoint(
    thread_id: str,
    exchange: FirstExchangeCreate,
    user: UserProfile = Depends(get_current_user),
    thread_service: ThreadService = Depends(get_thread_service),
    message_service: MessageService = Depends(get_message_service),
) -> None:
    """Store the opening exchange; safe to retry after a partial failure."""
    try:
        await require_thread(thread_service, thread_id, user)
        await message_service.append_first_exchange(
            thread_id, exchange.user_message, exchange.assistant_message
        )
    except StoreError as e:
        raise store_failure("store first exchange", e)
