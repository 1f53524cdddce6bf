"""
Repository tests against an in-process mongomock collection.
"""
from __future__ import annotations

from datetime import datetime, timezone

import mongomock
import pytest
from bson import ObjectId
from pymongo.errors import AutoReconnect, ServerSelectionTimeoutError

from waitlist.core import config as core_config
from waitlist.db import mongo as db_mongo
from waitlist.repositories.base import DuplicateRecord, PersistenceError, StoreUnavailable, WriteFailed
from waitlist.repositories.mongo_repository import MongoSignupRepository
from waitlist.services.signup_service import build_service

from conftest import make_settings


@pytest.fixture()
def collection():
    return mongomock.MongoClient().wishlist.emails


@pytest.fixture()
def repo(collection):
    return MongoSignupRepository(collection=collection)


def test_insert_stores_email_and_server_timestamp(repo, collection):
    stamp = datetime(2024, 3, 1, 10, 30, tzinfo=timezone.utc)

    record_id = repo.insert("jane@example.com", stamp)

    assert ObjectId.is_valid(record_id)
    doc = collection.find_one({"_id": ObjectId(record_id)})
    assert doc["email"] == "jane@example.com"
    assert set(doc) == {"_id", "email", "submissionDate"}
    found = repo.find_by_email("jane@example.com")
    assert found.id == record_id
    assert found.submission_date == stamp


def test_find_by_email_missing(repo):
    assert repo.find_by_email("ghost@example.com") is None


def test_list_all_newest_first(repo):
    t1 = datetime(2024, 1, 1, tzinfo=timezone.utc)
    t2 = datetime(2024, 1, 2, tzinfo=timezone.utc)
    t3 = datetime(2024, 1, 3, tzinfo=timezone.utc)
    repo.insert("t2@example.com", t2)
    repo.insert("t3@example.com", t3)
    repo.insert("t1@example.com", t1)

    records = repo.list_all()

    assert [r.email for r in records] == ["t3@example.com", "t2@example.com", "t1@example.com"]
    assert [r.submission_date for r in records] == [t3, t2, t1]


def test_delete_by_id_twice(repo):
    record_id = repo.insert("jane@example.com", datetime(2024, 1, 1, tzinfo=timezone.utc))

    assert repo.delete_by_id(record_id) == 1
    assert repo.delete_by_id(record_id) == 0
    assert repo.list_all() == []


def test_delete_malformed_id_matches_nothing(repo):
    repo.insert("jane@example.com", datetime(2024, 1, 1, tzinfo=timezone.utc))
    assert repo.delete_by_id("not-an-object-id") == 0
    assert len(repo.list_all()) == 1


def test_collection_is_resolved_once(collection):
    calls = []

    def factory():
        calls.append(1)
        return collection

    repo = MongoSignupRepository(collection_factory=factory)
    repo.insert("a@example.com", datetime(2024, 1, 1, tzinfo=timezone.utc))
    repo.find_by_email("a@example.com")
    repo.list_all()

    assert len(calls) == 1


def test_unreachable_store_raises_store_unavailable():
    def factory():
        raise ServerSelectionTimeoutError("no servers")

    repo = MongoSignupRepository(collection_factory=factory)
    with pytest.raises(StoreUnavailable):
        repo.insert("a@example.com", datetime(2024, 1, 1, tzinfo=timezone.utc))


def test_insert_error_raises_write_failed():
    class FailingCollection:
        def insert_one(self, doc):
            raise AutoReconnect("primary stepped down")

    repo = MongoSignupRepository(collection=FailingCollection())

    with pytest.raises(WriteFailed):
        repo.insert("a@example.com", datetime(2024, 1, 1, tzinfo=timezone.utc))
    assert issubclass(WriteFailed, PersistenceError)


def test_missing_uri_is_store_unavailable(monkeypatch):
    monkeypatch.delenv("MONGODB_URI", raising=False)
    core_config.get_settings.cache_clear()
    db_mongo.get_client.cache_clear()
    try:
        repo = MongoSignupRepository()
        with pytest.raises(StoreUnavailable):
            repo.list_all()
    finally:
        core_config.get_settings.cache_clear()
        db_mongo.get_client.cache_clear()


def test_get_client_is_cached_per_uri(mongomock_client):
    first = db_mongo.get_client("mongodb://db.example.test:27017")

    assert db_mongo.get_client("mongodb://db.example.test:27017") is first
    assert db_mongo.get_client("mongodb://other.example.test:27017") is not first
    assert len(mongomock_client.uris) == 2


class MongomockClient:
    """Stands in for pymongo.MongoClient; records the URI it was built with."""

    uris: list[str] = []

    def __init__(self, uri, **kwargs):
        MongomockClient.uris.append(uri)
        self.admin = self
        self._inner = mongomock.MongoClient()

    def command(self, name):
        return {"ok": 1.0}

    def __getitem__(self, name):
        return self._inner[name]


@pytest.fixture()
def mongomock_client(monkeypatch):
    MongomockClient.uris = []
    monkeypatch.setattr(db_mongo, "MongoClient", MongomockClient)
    db_mongo.get_client.cache_clear()
    yield MongomockClient
    db_mongo.get_client.cache_clear()


def test_service_uses_injected_mongo_settings(mongomock_client, monkeypatch):
    monkeypatch.delenv("MONGODB_URI", raising=False)
    settings = make_settings(
        storage_backend="mongo",
        mongodb_uri="mongodb://injected.example.test:27017",
        mongodb_db="launch",
        mongodb_collection="signups",
    )
    svc = build_service(settings)

    svc.repository.insert("jane@example.com", datetime(2024, 1, 1, tzinfo=timezone.utc))

    collection = svc.repository._get_collection()
    assert collection.database.name == "launch"
    assert collection.name == "signups"
    assert mongomock_client.uris == ["mongodb://injected.example.test:27017"]


def test_email_index_is_unique(collection):
    repo = MongoSignupRepository(collection=collection)
    collection.create_index([("email", 1)], unique=True)
    stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)

    repo.insert("jane@example.com", stamp)
    with pytest.raises(DuplicateRecord):
        repo.insert("jane@example.com", stamp)
    assert len(repo.list_all()) == 1


def test_get_collection_creates_unique_email_index(mongomock_client):
    settings = make_settings(mongodb_uri="mongodb://db.example.test:27017")

    collection = db_mongo.get_collection(settings)

    email_indexes = [ix for ix in collection.index_information().values() if ix["key"] == [("email", 1)]]
    assert email_indexes and email_indexes[0].get("unique") is True
