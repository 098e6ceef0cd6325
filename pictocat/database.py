"""
PictoCat Database Module

MongoDB connection management and indexing.
"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from pictocat.config import settings

logger = logging.getLogger(__name__)


class Database:
    """MongoDB database connection manager"""

    client: Optional[AsyncIOMotorClient] = None
    db: Optional[AsyncIOMotorDatabase] = None

    @classmethod
    async def connect(cls) -> None:
        """Establish connection to MongoDB"""
        try:
            cls.client = AsyncIOMotorClient(settings.mongodb_uri, tz_aware=True)
            cls.db = cls.client[settings.mongodb_database]

            await cls.client.admin.command("ping")
            logger.info(f"Connected to MongoDB: {settings.mongodb_database}")

            await cls._create_indexes()
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    @classmethod
    async def disconnect(cls) -> None:
        """Close MongoDB connection"""
        if cls.client:
            cls.client.close()
            logger.info("Disconnected from MongoDB")

    @classmethod
    async def _create_indexes(cls) -> None:
        """Create necessary indexes for collections"""
        if cls.db is None:
            return

        # Users
        await cls.db.users.create_index("username", unique=True)
        await cls.db.users.create_index("friends", background=True)

        # Catalog
        await cls.db.cats.create_index("numeric_id", unique=True)
        await cls.db.cats.create_index("rarity", background=True)

        # Public phrase projection, one per (author, phrase)
        await cls.db.public_phrases.create_index(
            [("userId", 1), ("phraseId", 1)],
            unique=True
        )
        await cls.db.public_phrases.create_index(
            [("privacy", 1), ("userId", 1)],
            background=True
        )

        logger.info("Database indexes created")

    @classmethod
    async def check_health(cls) -> bool:
        """Check if database connection is alive"""
        if cls.client is None:
            return False
        try:
            await cls.client.admin.command("ping")
            return True
        except Exception as e:
            logger.warning(f"Database health check failed: {e}")
            return False

    @classmethod
    def get_db(cls) -> AsyncIOMotorDatabase:
        """Get database instance"""
        if cls.db is None:
            raise RuntimeError("Database not connected. Call Database.connect() first.")
        return cls.db


def get_db() -> AsyncIOMotorDatabase:
    """Shortcut used by the service layer."""
    return Database.get_db()
