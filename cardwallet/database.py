"""
MongoDB connection and the document store adapter.

Each account has one schemaless record in the users collection, keyed by
the identity account id (_id). Records are read and written as plain dicts
through Motor; shaping them into models is the record codec's job.
"""

import logging
from typing import Any, List, Optional, Protocol

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo.errors import (
    AutoReconnect,
    ConnectionFailure,
    NetworkTimeout,
    PyMongoError,
    ServerSelectionTimeoutError,
)

from cardwallet.config import get_settings
from cardwallet.services.exceptions import RemoteServiceError

logger = logging.getLogger(__name__)

_TRANSIENT_ERRORS = (AutoReconnect, NetworkTimeout, ServerSelectionTimeoutError, ConnectionFailure)


class DocumentStore(Protocol):
    async def get(self, key: str) -> Optional[dict]:
        ...

    async def set(self, key: str, record: dict) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...

    async def array_union(self, key: str, field: str, items: List[Any]) -> None:
        ...

    async def array_remove(self, key: str, field: str, items: List[Any]) -> None:
        ...


def _remote_error(action: str, key: str, e: PyMongoError) -> RemoteServiceError:
    transient = isinstance(e, _TRANSIENT_ERRORS)
    logger.debug("MongoDB %s failed for %s (transient=%s): %s", action, key, transient, e)
    return RemoteServiceError(str(e), transient=transient)


class MongoDocumentStore:
    """DocumentStore over a Motor collection."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def get(self, key: str) -> Optional[dict]:
        try:
            record = await self.collection.find_one({"_id": key})
        except PyMongoError as e:
            raise _remote_error("get", key, e) from e
        if record is None:
            return None
        record.pop("_id", None)
        return record

    async def set(self, key: str, record: dict) -> None:
        """Overwrite the whole record, creating it if needed."""
        try:
            await self.collection.replace_one({"_id": key}, record, upsert=True)
        except PyMongoError as e:
            raise _remote_error("set", key, e) from e

    async def delete(self, key: str) -> None:
        try:
            await self.collection.delete_one({"_id": key})
        except PyMongoError as e:
            raise _remote_error("delete", key, e) from e

    async def _update(self, action: str, key: str, update: dict) -> None:
        try:
            result = await self.collection.update_one({"_id": key}, update)
        except PyMongoError as e:
            raise _remote_error(action, key, e) from e
        # Updates never create records; a missing one is reported, not upserted
        if result.matched_count == 0:
            raise RemoteServiceError(f"No document to update: {self.collection.name}/{key}")

    async def array_union(self, key: str, field: str, items: List[Any]) -> None:
        """Append items not already present (exact equality)."""
        await self._update("array_union", key, {"$addToSet": {field: {"$each": list(items)}}})

    async def array_remove(self, key: str, field: str, items: List[Any]) -> None:
        """Remove every entry exactly equal to one of items; absent entries are a no-op."""
        # $in compares whole embedded documents; a bare document in $pull would match subsets
        await self._update("array_remove", key, {"$pull": {field: {"$in": list(items)}}})


def connect_to_mongo() -> AsyncIOMotorClient:
    """
    Create the Motor client. Motor connects lazily, so this does not block;
    the first query surfaces connection problems.
    """
    settings = get_settings()
    client = AsyncIOMotorClient(settings.mongodb_url)
    logger.info("MongoDB client created for database %s", settings.mongodb_database)
    return client


def users_store(client: AsyncIOMotorClient) -> MongoDocumentStore:
    settings = get_settings()
    return MongoDocumentStore(client[settings.mongodb_database][settings.users_collection])


def close_mongo_connection(client: Optional[AsyncIOMotorClient]) -> None:
    logger.info("Closing MongoDB connection.")
    if client is not None:
        client.close()
