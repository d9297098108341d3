"""Test configuration."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

import app.models  # noqa: F401  (registers tables on Base.metadata)
from app.auth.attempt_store import LoginAttemptStore
from app.auth.credentials import VerifiedCredentials
from app.auth.dependencies import get_credential_verifier, get_login_guard, require_admin
from app.auth.login_guard import LoginAttemptGuard
from app.auth.rate_limit import limiter
from app.database import build_session_factory, init_db
from app.main import create_application
from app.models import UserRole

VALID_EMAIL = "engineer@docubuild.io"
VALID_PASSWORD = "correct-horse-battery"


class FakeClock:
    """Controllable replacement for the guard's clock."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeVerifier:
    """Credential verifier that accepts a single email/password pair."""

    def __init__(self):
        self.calls = 0

    async def verify(self, email: str, password: str):
        self.calls += 1
        if email == VALID_EMAIL and password == VALID_PASSWORD:
            return VerifiedCredentials(
                user_id="4d9c1d3e-0f0a-4b8e-9a51-3f2f0c7b2a10",
                email=email,
                access_token="access-token",
                refresh_token="refresh-token",
            )
        return None


class FakeAdminProfile:
    """Minimal stand-in for an administrator Profile."""

    id = uuid.UUID("0b7f5d1e-6c2a-4f4e-8f3d-2a9c1e5b7d40")
    email = "admin@docubuild.io"
    full_name = "Site Admin"
    role = UserRole.ADMIN
    is_admin = True


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 17, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'login_attempts.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def store(engine):
    return LoginAttemptStore(build_session_factory(engine))


@pytest.fixture
def guard(store, clock):
    return LoginAttemptGuard(store, timeout_seconds=2.0, clock=clock)


@pytest.fixture
def verifier():
    return FakeVerifier()


@pytest.fixture
def app(guard, verifier):
    a = create_application()
    a.dependency_overrides[get_login_guard] = lambda: guard
    a.dependency_overrides[get_credential_verifier] = lambda: verifier
    a.dependency_overrides[require_admin] = lambda: FakeAdminProfile()
    limiter.enabled = False
    yield a
    limiter.enabled = True


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def unauthenticated_client(guard):
    """Client with NO admin override -- tests that admin endpoints require auth."""
    a = create_application()
    a.dependency_overrides[get_login_guard] = lambda: guard
    transport = ASGITransport(app=a)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
