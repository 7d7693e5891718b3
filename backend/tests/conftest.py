"""
Shared fixtures.

Settings are read from the environment when ``dashboard.config`` is first
imported, so the variables are set here before any test module imports the
application.
"""

import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path

_TEST_DIR = Path(tempfile.mkdtemp(prefix="dashboard-tests-"))

os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TEST_DIR / 'dashboard.db'}")
os.environ.setdefault("GOOGLE__CLIENT_ID", "test-client-id")
os.environ.setdefault("GOOGLE__CLIENT_SECRET", "test-client-secret")
os.environ.setdefault(
    "SESSION__SECRET_KEY", "test-session-secret-0123456789abcdef0123456789abcdef"
)
os.environ.setdefault("LOGS_DIR", str(_TEST_DIR / "logs"))

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from dashboard.config import ProbeSettings  # noqa: E402
from dashboard.db.database import get_db  # noqa: E402
from dashboard.dependencies import get_prober  # noqa: E402
from dashboard.main import app  # noqa: E402
from dashboard.models import Base  # noqa: E402
from dashboard.status import StatusProber  # noqa: E402
from fixtures.probe import FakeStatusQuery  # noqa: E402


@pytest.fixture
def fake_query():
    return FakeStatusQuery()


@pytest.fixture
def prober(fake_query):
    return StatusProber(ProbeSettings(), query=fake_query)


@pytest.fixture
async def test_database():
    """Create isolated test database."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    db_url = f"sqlite+aiosqlite:///{db_path}"
    engine = create_async_engine(db_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    @asynccontextmanager
    async def get_session():
        async with async_session_maker() as session:
            yield session

    yield get_session

    await engine.dispose()
    Path(db_path).unlink(missing_ok=True)


@pytest.fixture
async def client(test_database, prober):
    """HTTP client talking to the app in-process, backed by the test database."""

    async def override_get_db():
        async with test_database() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_prober] = lambda: prober

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://testserver"
    ) as http_client:
        yield http_client

    app.dependency_overrides.clear()
