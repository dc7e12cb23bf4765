"""Request-scoped construction of services from the application's clients."""

from typing import Optional
from fastapi import Depends, Header, HTTPException, Request, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.models.user import UserProfile
from app.services.chat_service import ChatService
from app.services.label_service import LabelService
from app.services.message_service import MessageService
from app.services.reconciliation_service import ReconciliationService
from app.services.thread_service import ThreadService
from app.utils.llm_client import LLMClient


def get_database(request: Request) -> AsyncIOMotorDatabase:
    return request.app.state.mongodb.database


def get_llm_client(request: Request) -> LLMClient:
    return request.app.state.llm_client


def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_email: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
    x_user_photo: Optional[str] = Header(None),
) -> UserProfile:
    """User resolved upstream by the identity provider and forwarded in headers."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return UserProfile(
        id=x_user_id,
        email=x_user_email or None,
        display_name=x_user_name,
        photo_url=x_user_photo,
    )


def get_thread_service(database: AsyncIOMotorDatabase = Depends(get_database)) -> ThreadService:
    return ThreadService(database)


def get_message_service(
    database: AsyncIOMotorDatabase = Depends(get_database),
    thread_service: ThreadService = Depends(get_thread_service),
) -> MessageService:
    return MessageService(database, thread_service)


def get_label_service(llm_client: LLMClient = Depends(get_llm_client)) -> LabelService:
    return LabelService(llm_client)


def get_reconciliation_service(
    thread_service: ThreadService = Depends(get_thread_service),
    message_service: MessageService = Depends(get_message_service),
) -> ReconciliationService:
    return ReconciliationService(thread_service, message_service)


def get_chat_service(
    thread_service: ThreadService = Depends(get_thread_service),
    message_service: MessageService = Depends(get_message_service),
    llm_client: LLMClient = Depends(get_llm_client),
) -> ChatService:
    return ChatService(thread_service, message_service, llm_client)
