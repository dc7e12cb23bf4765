"""MongoDB connection and configuration."""

import logging
import os
from typing import Optional
from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

load_dotenv()
logger = logging.getLogger(__name__)

THREADS_COLLECTION = "threads"
MESSAGES_COLLECTION = "messages"


async def ensure_indexes(database: AsyncIOMotorDatabase) -> None:
    """Create the indexes backing the two list queries."""
    await database[THREADS_COLLECTION].create_index(
        [("userId", ASCENDING), ("createdAt", DESCENDING)]
    )
    await database[MESSAGES_COLLECTION].create_index(
        [("threadId", ASCENDING), ("createdAt", ASCENDING)]
    )


class MongoDB:
    """Owns the Motor client for the lifetime of the application.

    Built once at startup and handed to the stores; nothing reaches for it
    through module globals.
    """

    def __init__(self, url: Optional[str] = None, db_name: Optional[str] = None):
        self.url = (url or os.getenv("MONGODB_URL", "mongodb://localhost:27017")).strip()
        self.db_name = (db_name or os.getenv("MONGODB_DB_NAME", "freechat")).strip()
        self.client: Optional[AsyncIOMotorClient] = None

    @property
    def database(self) -> AsyncIOMotorDatabase:
        if self.client is None:
            raise RuntimeError("MongoDB is not connected")
        return self.client[self.db_name]

    async def connect(self) -> AsyncIOMotorDatabase:
        """Open the client, check the server answers and create indexes."""
        logger.info(f"Connecting to MongoDB database: {self.db_name}")
        self.client = AsyncIOMotorClient(self.url)
        try:
            await self.client.admin.command("ping")
            await ensure_indexes(self.database)
        except PyMongoError:
            logger.error("Could not connect to MongoDB", exc_info=True)
            self.client.close()
            self.client = None
            raise
        logger.info("MongoDB connection established")
        return self.database

    async def close(self) -> None:
        if self.client is not None:
            self.client.close()
            self.client = None
            logger.info("MongoDB connection closed")
