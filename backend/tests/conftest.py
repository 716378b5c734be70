"""
CallBoard Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The real app runs against a throwaway SQLite database (aiosqlite); the
       image host is replaced with httpx.MockTransport so no test touches the
       network.

Fixture Hierarchy:
    Autouse:
    └── database: fresh schema for every test, pool disposed afterwards

    Function-scoped:
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── png_bytes / text_bytes: upload payloads
    ├── image_host: records uploads and answers like the real host
    ├── test_client: HTTPX AsyncClient bound to the ASGI app
    └── register_user / login_user / auth_headers: account helpers
"""

import io
import os
import struct
import tempfile
import zlib
from typing import Any, Callable, Dict, List
from unittest.mock import AsyncMock, MagicMock

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Must run before anything imports app.config
_TEST_DIR = tempfile.mkdtemp(prefix="callboard_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["HASH_ROUNDS"] = "4"
os.environ["IMAGE_HOST_URL"] = "https://images.test/1/upload"
os.environ["IMAGE_HOST_API_KEY"] = "test-key-not-real"
os.environ["RETRY_MAX_ATTEMPTS"] = "3"
os.environ["RETRY_MIN_WAIT"] = "0"
os.environ["RETRY_MAX_WAIT"] = "0"
os.environ["RETRY_JITTER"] = "0"
os.environ["LOG_LEVEL"] = "WARNING"

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from PIL import Image  # noqa: E402

from app.database import create_tables, dispose_engine, drop_tables  # noqa: E402
from app.services.image_service import image_service  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture(autouse=True)
async def database():
    await drop_tables()
    await create_tables()
    yield
    # Pooled aiosqlite connections must not outlive the test's event loop
    await dispose_engine()


@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.get.return_value = call
        await call_service.add_to_favourites(mock_db_session, user, call.id)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock(return_value=None)
    session.flush = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Upload payloads
# ══════════════════════════════════════════════════════════════════════════

def make_png(color: str = "red") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color).save(buffer, format="PNG")
    return buffer.getvalue()


def make_oversized_png(width: int = 20000, height: int = 20000) -> bytes:
    """A tiny PNG whose header declares far more pixels than Pillow will open."""
    def chunk(kind: bytes, data: bytes) -> bytes:
        crc = zlib.crc32(kind + data) & 0xFFFFFFFF
        return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", crc)

    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", header)
        + chunk(b"IDAT", zlib.compress(b""))
        + chunk(b"IEND", b"")
    )


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def text_bytes() -> bytes:
    return b"definitely not an image"


# ══════════════════════════════════════════════════════════════════════════
# Image host
# ══════════════════════════════════════════════════════════════════════════

class FakeImageHost:
    """
    Stand-in for the imgbb-compatible host.

    `responses` is consumed first (status codes to answer with); once empty
    every upload succeeds with a numbered URL.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.responses: List[int] = []
        self.always_fail_with: int = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.always_fail_with:
            return httpx.Response(self.always_fail_with, json={"error": "host down"})
        if self.responses:
            status = self.responses.pop(0)
            if status >= 400:
                return httpx.Response(status, json={"error": "failed"})
        url = f"https://images.test/i/{len(self.requests)}.png"
        return httpx.Response(200, json={"data": {"url": url}, "success": True})

    @property
    def upload_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def image_host(monkeypatch) -> FakeImageHost:
    host = FakeImageHost()
    monkeypatch.setattr(image_service, "transport", httpx.MockTransport(host.handler))
    return host


# ══════════════════════════════════════════════════════════════════════════
# HTTP client and account helpers
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(image_host):
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    Depends on image_host so no route test can reach the real image host.
    """
    from app.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def user_payload(email: str = "test@email.com", **overrides: Any) -> Dict[str, Any]:
    payload = {
        "email": email,
        "firstName": "Test",
        "secondName": "User",
        "phone": "+380991234567",
        "password": "qwerty123",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def register_user(test_client) -> Callable:
    async def _register(email: str = "test@email.com", **overrides: Any) -> httpx.Response:
        return await test_client.post("/auth/register", json=user_payload(email, **overrides))
    return _register


@pytest.fixture
def login_user(test_client, register_user) -> Callable:
    """Registers (if needed) and logs in; returns the login response body."""
    async def _login(email: str = "test@email.com", password: str = "qwerty123") -> Dict[str, Any]:
        await register_user(email, password=password)
        response = await test_client.post(
            "/auth/login", json={"email": email, "password": password}
        )
        assert response.status_code == 200, response.text
        return response.json()
    return _login


@pytest_asyncio.fixture
async def auth_headers(login_user) -> Dict[str, str]:
    body = await login_user()
    return {"Authorization": f"Bearer {body['token']}"}


def call_form(**overrides: Any) -> Dict[str, str]:
    form = {
        "title": "Laptop",
        "description": "Barely used, charger included",
        "category": "electronics",
        "price": "1200",
    }
    form.update(overrides)
    return {k: v for k, v in form.items() if v is not None}


def image_files(*contents: bytes, content_type: str = "image/png") -> List:
    return [("file", (f"image{i}.png", data, content_type)) for i, data in enumerate(contents)]
