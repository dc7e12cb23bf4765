"""Error types shared by the stores and services."""

from typing import Optional


class StoreError(Exception):
    """Failure talking to the document database."""

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation


class ThreadNotFoundError(StoreError):
    """The thread id is unknown or belongs to another user."""

    def __init__(self, thread_id: str, operation: Optional[str] = None):
        super().__init__(f"Thread not found: {thread_id}", operation)
        self.thread_id = thread_id


class PartialWriteError(StoreError):
    """The first exchange stored the user message but not the rest."""

    def __init__(self, thread_id: str, message: str):
        super().__init__(message, operation="append_first_exchange")
        self.thread_id = thread_id


class GenerationError(Exception):
    """Failure of a call to the LLM completion endpoint."""
