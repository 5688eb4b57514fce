import asyncio
import os
import tempfile
from typing import Optional

# Settings are read at import time, so the environment must be in place
# before anything from blog_api is imported.
_DB_DIR = tempfile.mkdtemp(prefix="blog-api-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["JWT_SECRET_KEY"] = "test-signing-key-0123456789abcdef0123456789abcdef"
os.environ["CLOUDINARY_CLOUD_NAME"] = "demo"
os.environ["CLOUDINARY_API_KEY"] = "test-api-key"
os.environ["CLOUDINARY_API_SECRET"] = "test-api-secret"
os.environ["IMAGE_API_URL"] = "https://images.test"
os.environ["OTEL_EXPORTER_OTLP_ENDPOINT"] = ""

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from blog_api.clients.image_client import image_client  # noqa: E402
from blog_api.config import settings  # noqa: E402
from blog_api.database import Base, engine  # noqa: E402
from blog_api.main import app  # noqa: E402

API = settings.api_prefix


async def _drop_all() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


def run(coro):
    """Run a coroutine against the test database from synchronous test code."""
    return asyncio.run(coro)


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    run(_drop_all())


def signup(client: TestClient, email: str, password: str = "pw", name: str = "Ann") -> str:
    resp = client.post(
        f"{API}/signup", json={"email": email, "password": password, "name": name}
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["token"]


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def create_post(client: TestClient, token: str, **fields) -> dict:
    body = {"title": "T", "content": "C", "published": True, **fields}
    resp = client.post(f"{API}/blog", json=body, headers=bearer(token))
    assert resp.status_code == 200, resp.text
    return resp.json()


@pytest.fixture
def ann(client) -> str:
    return signup(client, "ann@example.com", name="Ann")


@pytest.fixture
def bob(client) -> str:
    return signup(client, "bob@example.com", name="Bob")


class FakeImageProvider:
    """Stands in for the image storage API behind an httpx.MockTransport."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.error_text = ""
        self.success_text: Optional[str] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code >= 400:
            return httpx.Response(self.status_code, text=self.error_text)
        if self.success_text is not None:
            return httpx.Response(200, text=self.success_text)
        return httpx.Response(
            200, json={"secure_url": "https://cdn.images.test/medium-blog/abc123.png"}
        )


@pytest.fixture
def image_provider(client):
    provider = FakeImageProvider()
    original = image_client._http
    mock = httpx.AsyncClient(
        base_url=settings.image_api_url, transport=httpx.MockTransport(provider.handler)
    )
    image_client._http = mock
    yield provider
    image_client._http = original
    run(mock.aclose())
