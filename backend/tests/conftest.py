"""Test fixtures for the backend."""
import os
import tempfile
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("STORE_BACKEND", "json")
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="jobboard-test-"))
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from jobboard.core.config import Settings  # noqa: E402
from jobboard.core.security import build_password_context  # noqa: E402
from jobboard.db.repositories import AnalyticsRepository, UserRepository  # noqa: E402
from jobboard.db.store import JsonFileRecordStore  # noqa: E402
from jobboard.main import bootstrap_admin, create_app  # noqa: E402
from jobboard.services import (  # noqa: E402
    CredentialEngine,
    VerificationCheck,
    VerificationProvider,
    VerificationStart,
)

ADMIN_EMAIL = "admin@jobboard.test"
ADMIN_PASSWORD = "admin#123"
GOOD_CODE = "123456"


class FakeVerificationProvider(VerificationProvider):
    """Approves GOOD_CODE for any number that was sent a code."""

    def __init__(self, configured: bool = True):
        self._configured = configured
        self.started: list[str] = []
        self.checked: list[tuple[str, str]] = []

    @property
    def configured(self) -> bool:
        return self._configured

    async def start_verification(self, phone_number: str) -> VerificationStart:
        self.started.append(phone_number)
        return VerificationStart(verification_id=f"VE{len(self.started):04d}", status="pending")

    async def check_verification(self, phone_number: str, code: str) -> VerificationCheck:
        self.checked.append((phone_number, code))
        return VerificationCheck(status="approved" if code == GOOD_CODE else "pending")


class FrozenClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime | None = None):
        self.now = now or datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta) -> None:
        self.now = self.now + delta


@pytest.fixture
def store(tmp_path) -> JsonFileRecordStore:
    return JsonFileRecordStore(tmp_path / "data")


@pytest.fixture
def users(store) -> UserRepository:
    return UserRepository(store)


@pytest.fixture
def events(store) -> AnalyticsRepository:
    return AnalyticsRepository(store)


@pytest.fixture
def credentials(users) -> CredentialEngine:
    return CredentialEngine(users, build_password_context(rounds=4))


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        STORE_BACKEND="json",
        DATA_DIR=str(tmp_path / "data"),
        JWT_SECRET="test-secret",
        BCRYPT_ROUNDS=4,
        ADMIN_EMAIL=ADMIN_EMAIL,
        ADMIN_PASSWORD=ADMIN_PASSWORD,
        ORIGIN="http://localhost:8080",
    )


@pytest.fixture
def sms_provider() -> FakeVerificationProvider:
    return FakeVerificationProvider()


@pytest.fixture
def app(settings, store, sms_provider):
    application = create_app(settings, store=store, sms_provider=sms_provider)
    bootstrap_admin(application.state.services)
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncClient:
    """Provide an HTTP client for integration tests."""

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()
