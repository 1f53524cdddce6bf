"""Client helpers for the MongoDB backend."""
from __future__ import annotations

import logging
from functools import lru_cache

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import OperationFailure, PyMongoError

from waitlist.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class StoreConfigurationError(RuntimeError):
    """Raised when MONGODB_URI is not configured."""


@lru_cache
def get_client(uri: str) -> MongoClient:
    """One client per URI for the process; pymongo pools connections internally."""
    uri = (uri or "").strip()
    if not uri:
        raise StoreConfigurationError("MONGODB_URI must be configured to use the MongoDB backend.")
    client = MongoClient(uri, tz_aware=True)
    try:
        client.admin.command("ping")
    except PyMongoError:
        client.close()
        logger.exception("MongoDB connection error")
        raise
    logger.info("MongoDB connection established")
    return client


def get_collection(settings: Settings | None = None) -> Collection:
    settings = settings or get_settings()
    collection = get_client(settings.mongodb_uri)[settings.mongodb_db][settings.mongodb_collection]
    try:
        collection.create_index([("email", ASCENDING)], unique=True)
    except OperationFailure as exc:
        # existing duplicates or a conflicting non-unique index; the lookup before insert still applies
        logger.warning("Unique email index not created on %s: %s", collection.name, exc)
    return collection
