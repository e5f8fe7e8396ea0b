"""
Shared test fixtures for the Afri Soutien API test suite.

Async throughout (aiosqlite + AsyncSession); the app's ``get_db`` is
swapped for an in-memory database and the notifier for a recorder.
"""

import os
import sys
from collections.abc import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-access-secret-0123456789abcdefghijklmnop"
os.environ["REFRESH_SECRET"] = "test-refresh-secret-0123456789abcdefghijklmn"
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CORS_ORIGINS"] = '["http://test"]'
os.environ.pop("POSTMARK_API_TOKEN", None)
os.environ.pop("ADMIN_PASSWORD", None)

from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,  # noqa: E402
                                    create_async_engine)
from sqlalchemy.pool import StaticPool  # noqa: E402

from afrisoutien.api.deps import get_db  # noqa: E402
from afrisoutien.core.exceptions import EmailSendError  # noqa: E402
from afrisoutien.core.security import get_password_hash, issue_access_token  # noqa: E402
from afrisoutien.crud.user import create_user  # noqa: E402
from afrisoutien.db.base import Base  # noqa: E402
from afrisoutien.main import app  # noqa: E402
from afrisoutien.models.user import Role, User  # noqa: E402
from afrisoutien.services.notifications import NotificationService  # noqa: E402

PASSWORD = "password123"

# One in-memory database shared by every connection of the test engine
test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class RecordingNotifier(NotificationService):
    """Renders templates like the real service but keeps the mail in memory."""

    def __init__(self) -> None:
        super().__init__(None)
        self.sent: list[tuple[str, str, dict]] = []
        self.failing: set[str] = set()

    async def send(self, template, recipient, data) -> None:
        self.render(template, data)
        if template in self.failing:
            raise EmailSendError(f"forced failure for {template}")
        self.sent.append((template, recipient, data))

    def templates(self) -> list[str]:
        return [template for template, _, _ in self.sent]


@pytest.fixture(autouse=True)
async def setup_db():
    """Create all tables before usage and drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestingSessionLocal() as session:
        yield session


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture
def notifier() -> RecordingNotifier:
    recorder = RecordingNotifier()
    app.state.notifier = recorder
    return recorder


@pytest.fixture(autouse=True)
def fresh_audit_log():
    app.state.audit_log.clear()
    yield app.state.audit_log


@pytest.fixture
async def async_client(notifier) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with TestingSessionLocal() as session:
        yield session


# ── Users ───────────────────────────────────────────────────────────
@pytest.fixture
def make_user(db_session: AsyncSession):
    async def _make(
        email: str,
        role: Role = Role.DONOR,
        *,
        is_verified: bool = False,
        first_name: str = "Awa",
        last_name: str = "Diallo",
    ) -> User:
        return await create_user(
            db_session,
            email=email,
            password_hash=get_password_hash(PASSWORD),
            first_name=first_name,
            last_name=last_name,
            role=role,
            is_verified=is_verified,
        )

    return _make


@pytest.fixture
async def donor(make_user) -> User:
    return await make_user("user@example.com", Role.DONOR)


@pytest.fixture
async def admin_user(make_user) -> User:
    return await make_user(
        "admin@afrisoutien.com", Role.ADMIN, is_verified=True, first_name="Admin"
    )


def bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_access_token(user.id)}"}


@pytest.fixture
def donor_headers(donor: User) -> dict[str, str]:
    return bearer(donor)


@pytest.fixture
def admin_headers(admin_user: User) -> dict[str, str]:
    return bearer(admin_user)
