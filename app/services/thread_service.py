"""Thread store: CRUD over the ``threads`` collection."""

import logging
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional
from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from app.config.mongodb import THREADS_COLLECTION
from app.exceptions import StoreError, ThreadNotFoundError
from app.models.base import utc_now
from app.models.thread import Thread

logger = logging.getLogger(__name__)

DEFAULT_THREAD_TITLE = "New Thread"
UNTITLED_THREAD_LABEL = "Untitled Thread"


def to_object_id(thread_id: str, operation: str) -> ObjectId:
    """Parse a thread id, treating malformed ids as not found."""
    try:
        return ObjectId(thread_id)
    except (InvalidId, TypeError) as e:
        raise ThreadNotFoundError(thread_id, operation) from e


def normalize_thread(document: dict) -> Thread:
    """Build a Thread, filling in label and preview for older documents."""
    document = dict(document)
    document["label"] = document.get("label") or document.get("title") or UNTITLED_THREAD_LABEL
    document["lastMessage"] = document.get("lastMessage") or ""
    return Thread.from_mongo(document)


def filter_threads(threads: Iterable[Thread], query: Optional[str]) -> List[Thread]:
    """Case-insensitive match of ``query`` against label or last message."""
    threads = list(threads)
    if not query:
        return threads
    needle = query.lower()
    return [
        thread for thread in threads
        if needle in (thread.label or "").lower() or needle in (thread.last_message or "").lower()
    ]


class ThreadService:
    """Service class for thread CRUD operations."""

    def __init__(self, database: AsyncIOMotorDatabase, clock: Callable[[], datetime] = utc_now):
        self.collection = database[THREADS_COLLECTION]
        self.clock = clock

    async def create_empty_thread(self, user_id: str) -> str:
        """Insert a placeholder thread for ``user_id`` and return its id."""
        now = self.clock()
        thread = Thread(
            user_id=user_id,
            title=DEFAULT_THREAD_TITLE,
            label=DEFAULT_THREAD_TITLE,
            last_message="",
            created_at=now,
            updated_at=now,
        )
        try:
            result = await self.collection.insert_one(thread.to_mongo())
        except PyMongoError as e:
            logger.error(f"Error creating empty thread for user {user_id}", exc_info=True)
            raise StoreError(f"Failed to create thread: {str(e)}", "create_empty_thread") from e

        thread_id = str(result.inserted_id)
        logger.info(f"Created thread {thread_id} for user {user_id}")
        return thread_id

    async def list_threads(self, user_id: str) -> List[Thread]:
        """All threads owned by ``user_id``, most recently created first."""
        try:
            cursor = self.collection.find({"userId": user_id}).sort("createdAt", DESCENDING)
            documents = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Error listing threads for user {user_id}", exc_info=True)
            raise StoreError(f"Failed to list threads: {str(e)}", "list_threads") from e

        logger.debug(f"Found {len(documents)} threads for user {user_id}")
        return [normalize_thread(document) for document in documents]

    async def stored_labels(self, user_id: str) -> Dict[str, Optional[str]]:
        """Raw ``label`` field of each thread owned by ``user_id``, ``None`` where unset."""
        try:
            cursor = self.collection.find({"userId": user_id}, {"label": 1})
            documents = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Error reading labels for user {user_id}", exc_info=True)
            raise StoreError(f"Failed to read labels: {str(e)}", "stored_labels") from e
        return {str(document["_id"]): document.get("label") for document in documents}

    async def get_thread(self, thread_id: str, user_id: Optional[str] = None) -> Optional[Thread]:
        """One thread by id, optionally restricted to its owner."""
        query = {"_id": to_object_id(thread_id, "get_thread")}
        if user_id is not None:
            query["userId"] = user_id
        try:
            document = await self.collection.find_one(query)
        except PyMongoError as e:
            logger.error(f"Error fetching thread {thread_id}", exc_info=True)
            raise StoreError(f"Failed to fetch thread: {str(e)}", "get_thread") from e
        return normalize_thread(document) if document else None

    async def update_thread_meta(
        self,
        thread_id: str,
        title: Optional[str] = None,
        label: Optional[str] = None,
        last_message: Optional[str] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        """
        Partially update thread metadata and bump ``updatedAt``.

        ``updatedAt`` defaults to the time of the call. It is written with
        ``$max`` so a late or backdated write never moves it backwards.

        Raises:
            ThreadNotFoundError: If no thread has this id
            StoreError: If the database call fails
        """
        object_id = to_object_id(thread_id, "update_thread_meta")
        fields = {}
        if title is not None:
            fields["title"] = title
        if label is not None:
            fields["label"] = label
        if last_message is not None:
            fields["lastMessage"] = last_message

        update = {"$max": {"updatedAt": updated_at or self.clock()}}
        if fields:
            update["$set"] = fields

        try:
            result = await self.collection.update_one({"_id": object_id}, update)
        except PyMongoError as e:
            logger.error(f"Error updating thread {thread_id}", exc_info=True)
            raise StoreError(f"Failed to update thread: {str(e)}", "update_thread_meta") from e

        if result.matched_count == 0:
            logger.warning(f"Thread {thread_id} not found for metadata update")
            raise ThreadNotFoundError(thread_id, "update_thread_meta")
        logger.debug(f"Updated thread {thread_id}: {sorted(fields)}")
