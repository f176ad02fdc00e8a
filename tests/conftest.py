import os

# Settings are read at import time, so the environment has to be in place first
os.environ.setdefault("SPACES_ENDPOINT", "https://storage.example.com")
os.environ.setdefault("SPACES_NAME", "question-papers")
os.environ.setdefault("ACCESS_KEY", "test-access-key")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("PUBLIC_BASE_URL", "https://cdn.example.com/question-papers")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret")
os.environ.setdefault("AUTH_MODE", "jwt")
os.environ.setdefault("AI_GATEWAY_API_KEY", "test-ai-key")

import pytest
from fastapi.testclient import TestClient

from core.init_app import create_application
from middleware.auth.auth_service import create_access_token
from services.chat_service import get_chat_gateway
from services.storage_service import get_object_store


class FakeObjectStore:
    """In-memory stand-in for ObjectStore that can be told to fail a given write."""

    def __init__(self, fail_on_call: int | None = None):
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.put_calls: list[str] = []
        self.deleted: list[str] = []
        self.fail_on_call = fail_on_call

    def put_object(self, key: str, data: bytes, content_type: str) -> None:
        call = len(self.put_calls)
        self.put_calls.append(key)
        if self.fail_on_call is not None and call == self.fail_on_call:
            raise RuntimeError("bucket unavailable")
        self.objects[key] = (data, content_type)

    def public_url(self, key: str) -> str:
        return f"https://cdn.example.com/question-papers/{key}"

    def delete_object(self, key: str) -> None:
        self.deleted.append(key)
        self.objects.pop(key, None)


class FakeChatGateway:
    def __init__(self, reply: str = "Photosynthesis turns light into chemical energy.", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[list[dict]] = []

    async def complete(self, messages: list[dict]) -> str:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.reply


PDF_BYTES = b"%PDF-1.7\n%\xe2\xe3\xcf\xd3\n1 0 obj\n<<>>\nendobj\n"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32
DOCX_BYTES = b"PK\x03\x04" + b"\x14\x00\x06\x00" + b"\x00" * 32


@pytest.fixture
def store():
    return FakeObjectStore()


@pytest.fixture
def chat_gateway():
    return FakeChatGateway()


@pytest.fixture
def app(store, chat_gateway):
    application = create_application()
    application.dependency_overrides[get_object_store] = lambda: store
    application.dependency_overrides[get_chat_gateway] = lambda: chat_gateway
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def principal_id():
    return "5d0c3f1e-7a61-4c4b-9f0a-2f6c1d9e8b11"


@pytest.fixture
def auth_headers(principal_id):
    token = create_access_token(principal_id, email="student@example.com")
    return {"Authorization": f"Bearer {token}"}
