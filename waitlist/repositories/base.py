from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Protocol

from waitlist.domain.records import SignupRecord


class PersistenceError(Exception):
    """Base class for storage failures surfaced as HTTP 500."""


class StoreUnavailable(PersistenceError):
    """The store could not be reached."""


class WriteFailed(PersistenceError):
    """The store was reachable but rejected the write."""


class DuplicateRecord(PersistenceError):
    """A record with the same email already exists."""


class SignupRepository(Protocol):
    def insert(self, email: str, timestamp: datetime) -> str:
        ...

    def find_by_email(self, email: str) -> Optional[SignupRecord]:
        ...

    def list_all(self) -> List[SignupRecord]:
        ...

    def delete_by_id(self, record_id: str) -> int:
        ...
