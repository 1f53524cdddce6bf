from __future__ import annotations

import sys
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Make the waitlist package importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from waitlist.app import create_app  # noqa: E402
from waitlist.core.config import Settings  # noqa: E402
from waitlist.core.mailer import NotificationError  # noqa: E402
from waitlist.core.rate_limiter import CooldownLimiter  # noqa: E402
from waitlist.repositories.memory_repository import InMemorySignupRepository  # noqa: E402
from waitlist.services.signup_service import WaitlistService  # noqa: E402

BASE_SETTINGS = Settings(
    app_env="dev",
    public_base_url="http://localhost:8000",
    brand_name="Nawab & Co.",
    storage_backend="memory",
    mongodb_uri="",
    mongodb_db="wishlist",
    mongodb_collection="emails",
    smtp_host="smtp.example.com",
    smtp_port=465,
    smtp_user="mailer@example.com",
    smtp_password="secret",
    smtp_from="mailer@example.com",
    smtp_timeout=5,
    admin_email="",
    signup_cooldown_ms=2000,
    mock_signup_delay_ms=0,
    log_level="WARNING",
    log_dir="",
)


def make_settings(**overrides) -> Settings:
    return replace(BASE_SETTINGS, **overrides)


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SteppingUtcClock:
    """Returns t0, t0+1s, t0+2s ... on successive calls."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 11, 5, 12, 0, 0, tzinfo=timezone.utc)
        self.issued: list[datetime] = []

    def __call__(self) -> datetime:
        value = self.current
        self.issued.append(value)
        self.current = value + timedelta(seconds=1)
        return value


class FakeNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.confirmations: list[str] = []
        self.alerts: list[tuple[str, str, datetime]] = []
        self.closed = False

    def send_user_confirmation(self, email: str) -> None:
        if self.fail:
            raise NotificationError("SMTP connection refused")
        self.confirmations.append(email)

    def send_admin_alert(self, admin_address: str, email: str, timestamp: datetime) -> None:
        if self.fail:
            raise NotificationError("SMTP connection refused")
        self.alerts.append((admin_address, email, timestamp))

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def repository() -> InMemorySignupRepository:
    return InMemorySignupRepository()


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def limiter_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def utc_clock() -> SteppingUtcClock:
    return SteppingUtcClock()


@pytest.fixture()
def service(settings, repository, notifier, limiter_clock, utc_clock) -> WaitlistService:
    return WaitlistService(
        settings=settings,
        repository=repository,
        notifier=notifier,
        limiter=CooldownLimiter(settings.signup_cooldown_ms / 1000, clock=limiter_clock),
        clock=utc_clock,
    )


@pytest.fixture()
def client(settings, service) -> TestClient:
    return TestClient(create_app(settings=settings, service=service))
