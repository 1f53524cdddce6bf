"""
Signup and admin use cases.

WaitlistService owns every piece of process-wide state (store handle, SMTP
session, cooldown map) and is built once per application.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import partial
from typing import Any, Callable, List, Optional

from waitlist.core.config import Settings
from waitlist.core.mailer import NotificationError, Notifier
from waitlist.core.rate_limiter import CooldownLimiter
from waitlist.domain.emails import is_valid_email
from waitlist.domain.records import SignupRecord
from waitlist.repositories.base import DuplicateRecord, SignupRepository

logger = logging.getLogger(__name__)


class SignupError(Exception):
    """Base class for signup rejections surfaced to the caller."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SignupError):
    pass


class DuplicateEmail(SignupError):
    pass


@dataclass
class SignupResult:
    record_id: str
    email: str
    submission_date: datetime
    email_sent: bool
    email_error: Optional[str] = None


def utc_now() -> datetime:
    """Current UTC time truncated to the millisecond precision BSON stores."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def extract_email(payload: Any) -> str:
    email = payload.get("email") if isinstance(payload, dict) else None
    if not email or not isinstance(email, str):
        raise ValidationError("Email is required")
    return email


class WaitlistService:
    """Validates, rate limits, persists and notifies for each signup."""

    def __init__(
        self,
        *,
        settings: Settings,
        repository: SignupRepository,
        notifier: Notifier,
        limiter: CooldownLimiter,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.settings = settings
        self.repository = repository
        self.notifier = notifier
        self.limiter = limiter
        self._clock = clock

    # -------------------------------------- signup --------------------------------------
    def signup(self, payload: Any, client_id: str) -> SignupResult:
        email = extract_email(payload)
        if not is_valid_email(email):
            raise ValidationError("Invalid email format")
        self.limiter.check(f"signup:{client_id}")
        if self.repository.find_by_email(email) is not None:
            raise DuplicateEmail("This email is already on the waitlist")

        submitted_at = self._clock()
        try:
            record_id = self.repository.insert(email, submitted_at)
        except DuplicateRecord:
            raise DuplicateEmail("This email is already on the waitlist")
        logger.info("Waitlist signup stored: %s", record_id)

        result = SignupResult(record_id=record_id, email=email, submission_date=submitted_at, email_sent=False)
        try:
            self._notify(email, submitted_at)
            result.email_sent = True
        except NotificationError as exc:
            # record stays stored; the response reports delayed confirmation
            logger.error("Confirmation email for %s failed: %s", email, exc)
            result.email_error = str(exc)
        return result

    def _notify(self, email: str, submitted_at: datetime) -> None:
        self.notifier.send_user_confirmation(email)
        if self.settings.admin_email:
            self.notifier.send_admin_alert(self.settings.admin_email, email, submitted_at)

    def mock_signup(self, payload: Any, client_id: str) -> None:
        """Cooldown and validation only; nothing is stored or sent."""
        self.limiter.check(f"mock-signup:{client_id}")
        email = payload.get("email") if isinstance(payload, dict) else None
        if not is_valid_email(email):
            raise ValidationError("Please enter a valid email address")
        delay = self.settings.mock_signup_delay_ms
        if delay > 0:
            time.sleep(delay / 1000)

    # -------------------------------------- admin --------------------------------------
    def list_signups(self) -> List[SignupRecord]:
        return self.repository.list_all()

    def delete_signup(self, record_id: str) -> bool:
        deleted = self.repository.delete_by_id(record_id)
        if deleted:
            logger.info("Waitlist signup deleted: %s", record_id)
        return deleted == 1


def build_service(settings: Settings) -> WaitlistService:
    if settings.storage_backend == "memory":
        from waitlist.repositories.memory_repository import InMemorySignupRepository

        repository: SignupRepository = InMemorySignupRepository()
    else:
        from waitlist.db.mongo import get_collection
        from waitlist.repositories.mongo_repository import MongoSignupRepository

        repository = MongoSignupRepository(collection_factory=partial(get_collection, settings))
    return WaitlistService(
        settings=settings,
        repository=repository,
        notifier=Notifier(settings),
        limiter=CooldownLimiter(settings.signup_cooldown_ms / 1000),
    )
