"""This file contains the schemas for the application."""
from app.schemas.threads import (
    ThreadResponse,
    ThreadCreateResponse,
    ThreadUpdate,
    ReconcileResponse,
    TitleRequest,
    TitleResponse,
)
from app.schemas.messages import (
    MessageCreate,
    MessageResponse,
    FirstExchangeCreate,
    ChatRequest,
)

__all__ = [
    "ThreadResponse",
    "ThreadCreateResponse",
    "ThreadUpdate",
    "ReconcileResponse",
    "TitleRequest",
    "TitleResponse",
    "MessageCreate",
    "MessageResponse",
    "FirstExchangeCreate",
    "ChatRequest",
]
