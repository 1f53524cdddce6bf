"""High-level data access helpers backed by pymongo."""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, List, Optional

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from waitlist.db.mongo import StoreConfigurationError, get_collection
from waitlist.domain.records import SignupRecord

from .base import DuplicateRecord, PersistenceError, StoreUnavailable, WriteFailed

logger = logging.getLogger(__name__)


def _to_record(doc: dict) -> SignupRecord:
    submitted = doc["submissionDate"]
    if submitted.tzinfo is None:
        submitted = submitted.replace(tzinfo=timezone.utc)
    return SignupRecord(id=str(doc["_id"]), email=doc["email"], submission_date=submitted)


class MongoSignupRepository:
    """CRUD helpers over the signup collection; the collection is resolved once and reused."""

    def __init__(
        self,
        collection: Collection | None = None,
        collection_factory: Callable[[], Collection] = get_collection,
    ) -> None:
        self._collection = collection
        self._collection_factory = collection_factory
        self._lock = threading.Lock()

    def _get_collection(self) -> Collection:
        if self._collection is None:
            with self._lock:
                if self._collection is None:
                    try:
                        self._collection = self._collection_factory()
                    except (StoreConfigurationError, PyMongoError) as exc:
                        raise StoreUnavailable("Failed to connect to database") from exc
        return self._collection

    def insert(self, email: str, timestamp: datetime) -> str:
        collection = self._get_collection()
        try:
            result = collection.insert_one({"email": email, "submissionDate": timestamp})
        except DuplicateKeyError as exc:
            raise DuplicateRecord(email) from exc
        except PyMongoError as exc:
            logger.error("Insert failed for %s: %s", email, exc)
            raise WriteFailed(str(exc)) from exc
        return str(result.inserted_id)

    def find_by_email(self, email: str) -> Optional[SignupRecord]:
        collection = self._get_collection()
        try:
            doc = collection.find_one({"email": email})
        except PyMongoError as exc:
            raise PersistenceError(str(exc)) from exc
        return _to_record(doc) if doc else None

    def list_all(self) -> List[SignupRecord]:
        collection = self._get_collection()
        try:
            return [_to_record(doc) for doc in collection.find().sort("submissionDate", DESCENDING)]
        except PyMongoError as exc:
            raise PersistenceError(str(exc)) from exc

    def delete_by_id(self, record_id: str) -> int:
        if not ObjectId.is_valid(record_id):
            return 0
        collection = self._get_collection()
        try:
            result = collection.delete_one({"_id": ObjectId(record_id)})
        except PyMongoError as exc:
            raise PersistenceError(str(exc)) from exc
        return result.deleted_count
