from __future__ import annotations

import threading
import uuid
from datetime import datetime
from typing import List, Optional

from waitlist.domain.records import SignupRecord

from .base import DuplicateRecord


class InMemorySignupRepository:
    """Simple in-memory signup storage (no MongoDB)."""

    def __init__(self) -> None:
        self.records: List[SignupRecord] = []
        self._lock = threading.Lock()

    def insert(self, email: str, timestamp: datetime) -> str:
        record = SignupRecord(id=uuid.uuid4().hex, email=email, submission_date=timestamp)
        with self._lock:
            if any(r.email == email for r in self.records):
                raise DuplicateRecord(email)
            self.records.append(record)
        return record.id

    def find_by_email(self, email: str) -> Optional[SignupRecord]:
        with self._lock:
            for record in self.records:
                if record.email == email:
                    return record
        return None

    def list_all(self) -> List[SignupRecord]:
        with self._lock:
            return sorted(self.records, key=lambda r: r.submission_date, reverse=True)

    def delete_by_id(self, record_id: str) -> int:
        with self._lock:
            before = len(self.records)
            self.records = [r for r in self.records if r.id != record_id]
            return before - len(self.records)
