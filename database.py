from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ReturnDocument

from config import settings

logger = logging.getLogger(__name__)


def to_client(doc: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    if doc and "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    return doc


def parse_id(doc_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(doc_id)
    except (InvalidId, TypeError):
        return None


class Store:
    """Document access for the shop collections.

    Every method returns plain dicts with the Mongo ``_id`` exposed as a string
    ``id``. Unknown or malformed ids yield ``None`` (or ``False`` for deletes)
    so the routes decide how to report them.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def ping(self) -> None:
        await self.db.command("ping")

    async def ensure_indexes(self) -> None:
        await self.db["users"].create_index("username", unique=True)

    async def create_document(self, collection_name: str, data: dict[str, Any]) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        data_with_meta = {**data, "created_at": now, "updated_at": now}
        result = await self.db[collection_name].insert_one(data_with_meta)
        inserted = await self.db[collection_name].find_one({"_id": result.inserted_id})
        return to_client(inserted) or {}

    async def get_documents(self, collection_name: str, filter_dict: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        cursor = self.db[collection_name].find(filter_dict or {})
        docs = []
        async for d in cursor:
            docs.append(to_client(d))
        return docs

    async def find_one(self, collection_name: str, filter_dict: dict[str, Any]) -> Optional[dict[str, Any]]:
        return to_client(await self.db[collection_name].find_one(filter_dict))

    async def get_document(self, collection_name: str, doc_id: str) -> Optional[dict[str, Any]]:
        oid = parse_id(doc_id)
        if oid is None:
            return None
        return await self.find_one(collection_name, {"_id": oid})

    async def update_document(self, collection_name: str, doc_id: str, data: dict[str, Any]) -> Optional[dict[str, Any]]:
        oid = parse_id(doc_id)
        if oid is None:
            return None
        doc = await self.db[collection_name].find_one_and_update(
            {"_id": oid},
            {"$set": {**data, "updated_at": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER,
        )
        return to_client(doc)

    async def delete_document(self, collection_name: str, doc_id: str) -> bool:
        oid = parse_id(doc_id)
        if oid is None:
            return False
        result = await self.db[collection_name].delete_one({"_id": oid})
        return result.deleted_count > 0

    async def upsert_singleton(self, collection_name: str, data: dict[str, Any]) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        doc = await self.db[collection_name].find_one_and_update(
            {},
            {"$set": {**data, "updated_at": now}, "$setOnInsert": {"created_at": now}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return to_client(doc) or {}


_client: Optional[AsyncIOMotorClient] = None
_store: Optional[Store] = None


async def get_store() -> Store:
    global _client, _store
    if _store is None:
        _client = AsyncIOMotorClient(settings.MONGODB_URI, serverSelectionTimeoutMS=5000)
        _store = Store(_client[settings.DATABASE_NAME])
    return _store
