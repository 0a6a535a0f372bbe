"""
Pytest configuration and fixtures for gator tests.
"""
import httpx
import pytest
from sqlalchemy.pool import StaticPool

import config
from auth import State
from config import Config
from models.database import Base, create_engine_for, create_session_maker, init_db
from services.queries import Queries


# Test database URL (in-memory SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

SAMPLE_FEED_URL = "https://blog.example.com/index.xml"

SAMPLE_RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
<channel>
  <title>Example &amp; Friends</title>
  <link>https://blog.example.com/</link>
  <description>Notes on Go &amp; Python</description>
  <item>
    <title>Tom &amp; Jerry</title>
    <link>https://blog.example.com/tom-and-jerry</link>
    <description>Cats &amp; mice</description>
    <pubDate>Mon, 02 Jan 2006 15:04:05 +0000</pubDate>
  </item>
  <item>
    <title>Fish &amp;amp; Chips</title>
    <link>https://blog.example.com/fish-and-chips</link>
    <description>Lunch</description>
    <pubDate>Tue, 03 Jan 2006 10:00:00 +0000</pubDate>
  </item>
  <item>
    <title>Untimed</title>
    <link>https://blog.example.com/untimed</link>
    <description>No date on this one</description>
  </item>
</channel>
</rss>
"""


@pytest.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_engine_for(TEST_DATABASE_URL, poolclass=StaticPool)

    # Create all tables
    await init_db(engine)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
def session_maker(test_engine):
    return create_session_maker(test_engine)


@pytest.fixture(scope="function")
async def db_session(session_maker):
    """Create a test database session."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def config_home(tmp_path, monkeypatch):
    """Point the config file at a temporary home directory."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("DATABASE_URL", raising=False)
    return tmp_path


@pytest.fixture
def state(config_home, session_maker):
    """Command state with a fresh config file and no current user."""
    cfg = Config(db_url=TEST_DATABASE_URL, current_user_name="")
    config.write(cfg)
    return State(config=cfg, session_maker=session_maker)


@pytest.fixture
async def alice(session_maker):
    """A registered user named alice."""
    async with session_maker() as session:
        user = await Queries(session).create_user("alice")
        await session.commit()
    return user


@pytest.fixture
async def feed_client():
    """HTTP client that serves SAMPLE_RSS and records the requests it saw."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, content=SAMPLE_RSS, headers={"Content-Type": "application/rss+xml"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        client.requests = requests
        yield client
