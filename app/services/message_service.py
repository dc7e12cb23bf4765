"""Message store: append-only history over the ``messages`` collection."""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from app.config.mongodb import MESSAGES_COLLECTION
from app.exceptions import PartialWriteError, StoreError, ThreadNotFoundError
from app.models.base import utc_now
from app.models.message import Message, MessageRole
from app.services.label_service import first_four_words, truncate_title
from app.services.thread_service import ThreadService

logger = logging.getLogger(__name__)

# Keeps the assistant reply of a first exchange strictly after the user message
# even when the store has coarse timestamp resolution.
ASSISTANT_REPLY_OFFSET = timedelta(seconds=1)


class MessageService:
    """Service class for message persistence."""

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        thread_service: ThreadService,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.collection = database[MESSAGES_COLLECTION]
        self.thread_service = thread_service
        self.clock = clock

    async def _insert(self, thread_id: str, role: MessageRole, content: str, created_at: datetime) -> Message:
        role = MessageRole(role)
        if role == MessageRole.SYSTEM:
            raise ValueError("System messages are injected at load time and never stored")

        message = Message(thread_id=thread_id, role=role, content=content, created_at=created_at)
        document = message.to_mongo()
        try:
            result = await self.collection.insert_one(document)
        except PyMongoError as e:
            logger.error(f"Error storing {role.value} message in thread {thread_id}", exc_info=True)
            raise StoreError(f"Failed to store message: {str(e)}", "append_message") from e
        message.id = str(result.inserted_id)
        return message

    async def _require_thread(self, thread_id: str, operation: str) -> None:
        # checked before any insert so a missing thread never gains messages
        if await self.thread_service.get_thread(thread_id) is None:
            raise ThreadNotFoundError(thread_id, operation)

    async def _latest_created_at(self, thread_id: str) -> Optional[datetime]:
        try:
            latest = await self.collection.find_one(
                {"threadId": thread_id},
                sort=[("createdAt", DESCENDING), ("_id", DESCENDING)],
            )
        except PyMongoError as e:
            logger.error(f"Error reading latest message of thread {thread_id}", exc_info=True)
            raise StoreError(f"Failed to read messages: {str(e)}", "append_message") from e
        return latest["createdAt"] if latest else None

    async def append_message(self, thread_id: str, role: MessageRole, content: str) -> Message:
        """
        Store one message and refresh the thread preview to match it.

        The timestamp never precedes the thread's latest message, which can sit
        slightly in the future after a first exchange.
        """
        await self._require_thread(thread_id, "append_message")
        now = self.clock()
        latest = await self._latest_created_at(thread_id)
        if latest is not None and latest > now:
            now = latest
        message = await self._insert(thread_id, role, content, now)
        await self.thread_service.update_thread_meta(thread_id, last_message=content, updated_at=now)
        logger.info(f"Appended {message.role.value} message {message.id} to thread {thread_id}")
        return message

    async def list_messages(self, thread_id: str) -> List[Message]:
        """
        Messages of a thread in conversation order.

        Sorted by ``createdAt`` ascending; ties fall back to insertion order
        via the ObjectId.
        """
        try:
            cursor = self.collection.find({"threadId": thread_id}).sort(
                [("createdAt", ASCENDING), ("_id", ASCENDING)]
            )
            documents = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Error listing messages for thread {thread_id}", exc_info=True)
            raise StoreError(f"Failed to list messages: {str(e)}", "list_messages") from e
        return [Message.from_mongo(document) for document in documents]

    async def append_first_exchange(self, thread_id: str, user_content: str, assistant_content: str) -> None:
        """
        Store the opening user/assistant pair and set the thread's title and label.

        The assistant reply is stamped one second after the user message. If a
        previous attempt stored the user message but died before the reply, only
        the reply and metadata are written. A thread that already holds an
        assistant reply is left alone.

        Raises:
            ThreadNotFoundError: No thread has this id; nothing was written
            PartialWriteError: The user message is stored but a later write failed
            StoreError: Nothing was written
        """
        await self._require_thread(thread_id, "append_first_exchange")
        existing = await self.list_messages(thread_id)
        if any(message.role == MessageRole.ASSISTANT for message in existing):
            logger.info(f"Thread {thread_id} already has a reply, skipping first exchange")
            return

        pending = next(
            (m for m in existing if m.role == MessageRole.USER and m.content == user_content),
            None,
        )
        if pending is not None:
            logger.info(f"Resuming first exchange in thread {thread_id} after earlier partial write")
            user_at = pending.created_at
        else:
            user_at = self.clock()
            await self._insert(thread_id, MessageRole.USER, user_content, user_at)

        reply_at = user_at + ASSISTANT_REPLY_OFFSET
        try:
            await self._insert(thread_id, MessageRole.ASSISTANT, assistant_content, reply_at)
            await self.thread_service.update_thread_meta(
                thread_id,
                title=truncate_title(user_content),
                label=first_four_words(assistant_content),
                last_message=assistant_content,
                updated_at=reply_at,
            )
        except StoreError as e:
            logger.error(
                f"Partial first exchange in thread {thread_id}: user message stored, "
                f"reply or metadata missing ({str(e)})"
            )
            raise PartialWriteError(thread_id, f"First exchange incomplete: {str(e)}") from e

        logger.info(f"Stored first exchange in thread {thread_id}")
