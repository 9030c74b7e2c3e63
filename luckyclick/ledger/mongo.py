"""MongoDB ledger via Motor (async driver).

Collections:
- ``users``: ``{user_id, balance}``, unique on ``user_id``
- ``tx_hashes``: ``{user_id, tx_hash}``, unique on the pair
"""

from __future__ import annotations

import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from luckyclick.errors import Unavailable

from .base import BalanceLedger, TxLedger

logger = logging.getLogger(__name__)


class MongoLedger(BalanceLedger, TxLedger):
    """Balance and transaction ledger stored in MongoDB."""

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        client: AsyncIOMotorClient | None = None,
    ):
        self._db = database
        self._client = client
        self.users = database["users"]
        self.tx_hashes = database["tx_hashes"]

    @classmethod
    def from_url(cls, url: str, database: str) -> MongoLedger:
        client = AsyncIOMotorClient(url, serverSelectionTimeoutMS=5000)
        logger.info(f"Initialized MongoLedger (database={database})")
        return cls(client[database], client=client)

    async def ensure_indexes(self) -> None:
        """Create the unique indexes the atomic operations rely on."""
        try:
            await self.users.create_index([("user_id", ASCENDING)], unique=True)
            await self.tx_hashes.create_index(
                [("user_id", ASCENDING), ("tx_hash", ASCENDING)], unique=True
            )
        except PyMongoError as e:
            logger.error(f"Failed to create ledger indexes: {e}")
            raise Unavailable() from e

    async def check_connection(self) -> bool:
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
            return True
        except PyMongoError:
            return False

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("Closed MongoLedger")

    async def get(self, user_id: int) -> int:
        try:
            doc = await self.users.find_one({"user_id": user_id})
        except PyMongoError as e:
            logger.error(f"Balance read failed for {user_id}: {e}")
            raise Unavailable() from e
        return int(doc["balance"]) if doc else 0

    async def adjust(self, user_id: int, delta: int) -> int:
        try:
            doc = await self.users.find_one_and_update(
                {"user_id": user_id},
                {"$inc": {"balance": delta}},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"Balance adjust {delta:+d} failed for {user_id}: {e}")
            raise Unavailable() from e
        return int(doc["balance"])

    async def mark_processed_if_new(self, user_id: int, tx_hash: str) -> bool:
        try:
            await self.tx_hashes.insert_one({"user_id": user_id, "tx_hash": tx_hash})
        except DuplicateKeyError:
            return False
        except PyMongoError as e:
            logger.error(f"Failed to record tx {tx_hash} for {user_id}: {e}")
            raise Unavailable() from e
        return True

    async def unmark(self, user_id: int, tx_hash: str) -> None:
        try:
            await self.tx_hashes.delete_one({"user_id": user_id, "tx_hash": tx_hash})
        except PyMongoError as e:
            logger.error(f"Failed to release tx {tx_hash} for {user_id}: {e}")
            raise Unavailable() from e
