"""Backfill of thread labels from each thread's first assistant reply."""

import logging

from app.models.message import MessageRole
from app.services.label_service import first_four_words
from app.services.message_service import MessageService
from app.services.thread_service import ThreadService

logger = logging.getLogger(__name__)


class ReconciliationService:
    """Brings stored labels in line with the first assistant reply of each thread.

    Meant for the small per-user histories of this app: it reads every message
    of every thread, so it is a migration aid rather than a hot path.
    """

    def __init__(self, thread_service: ThreadService, message_service: MessageService):
        self.thread_service = thread_service
        self.message_service = message_service

    async def reconcile_labels(self, user_id: str) -> int:
        """
        Rewrite stored labels that differ from the first four words of the first reply.

        Threads without an assistant reply are skipped. A second run with no
        new messages in between writes nothing.

        Returns:
            int: Number of threads whose label was updated
        """
        labels = await self.thread_service.stored_labels(user_id)
        updated = 0
        for thread_id, label in labels.items():
            messages = await self.message_service.list_messages(thread_id)
            first_reply = next((m for m in messages if m.role == MessageRole.ASSISTANT), None)
            if first_reply is None:
                continue

            expected = first_four_words(first_reply.content)
            # a blank reply yields no label to store
            if expected and label != expected:
                logger.debug(f"Relabeling thread {thread_id}: {label!r} -> {expected!r}")
                await self.thread_service.update_thread_meta(thread_id, label=expected)
                updated += 1

        logger.info(f"Label reconciliation for user {user_id}: {updated}/{len(labels)} threads updated")
        return updated
