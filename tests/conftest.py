"""Pytest configuration and fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient

from config import Config
from shortlinks.auth import AuthService
from shortlinks.database import MemoryDatabase
from shortlinks.service import LinkService
from shortlinks.shortcode import SlugGenerator
from shortlinks.tokens import TokenService
from shortlinks.common.logging_config import setup_logging
from web_app import create_app


TEST_SECRET = "test-secret-that-is-long-enough-for-hs256"


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def db(logger):
    """Fresh in-memory store."""
    return MemoryDatabase(logger=logger)


@pytest.fixture
def slug_generator():
    """Create slug generator."""
    return SlugGenerator(default_length=6)


@pytest.fixture
def link_service(db, slug_generator, logger):
    """Create link service instance."""
    return LinkService(db=db, slug_generator=slug_generator, logger=logger)


@pytest.fixture
def tokens():
    """Create token service."""
    return TokenService(secret=TEST_SECRET)


@pytest.fixture
def auth_service(db, tokens, logger):
    """Create auth service instance."""
    return AuthService(db=db, tokens=tokens, logger=logger)


@pytest.fixture
def config():
    """Test configuration (rate limiting off unless a test turns it on)."""
    return Config(
        database_url="memory://",
        base_url="http://testserver",
        jwt_secret=TEST_SECRET,
        cors_origin="http://localhost:3000",
        rate_limit_enabled=False,
        redis_url=None,
    )


@pytest.fixture
def app(config, db, logger):
    """Create test FastAPI app on the in-memory store."""
    return create_app(config, database=db, logger=logger)


@pytest.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]


@pytest.fixture
def register_user(client):
    """Register through the API; the helper returns (user, auth headers)."""

    async def _register(email="user@example.com", password="Password123"):
        response = await client.post("/api/auth/register", json={"email": email, "password": password})
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return data["user"], {"Authorization": f"Bearer {data['token']}"}

    return _register
