"""The signup record, the only entity the waitlist persists."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class SignupRecord:
    id: str
    email: str
    submission_date: datetime

    def to_json(self) -> dict:
        submitted = self.submission_date
        if submitted.tzinfo is None:
            # naive values are UTC
            submitted = submitted.replace(tzinfo=timezone.utc)
        return {
            "id": self.id,
            "email": self.email,
            "submissionDate": submitted.isoformat(),
        }
