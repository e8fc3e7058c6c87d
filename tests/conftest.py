from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from filegate.core.config import Settings, get_settings
from filegate.core.errors import IdentityUnavailableError, SessionExpiredError
from filegate.models.document import DocumentRecord
from filegate.models.user import AuthenticatedUser, UserRecord
from filegate.services.documents import get_document_repository
from filegate.services.identity import get_identity_verifier
from filegate.services.storage import get_storage
from main import app

USER_A = "user-a"
USER_B = "user-b"
ADMIN = "admin-1"
USER_INTL = "user-intl"

TOKENS = {
    "token-a": AuthenticatedUser(id=USER_A, email="a@example.com"),
    "token-b": AuthenticatedUser(id=USER_B, email="b@example.com"),
    "token-admin": AuthenticatedUser(id=ADMIN, email=None),
    "token-intl": AuthenticatedUser(id=USER_INTL, email="jos\u00e9@\u00e9cole.example"),
}


class FakeVerifier:
    """Stands in for the identity provider: known tokens map to users."""

    def __init__(self):
        self.calls: List[str] = []

    async def verify(self, token: str) -> AuthenticatedUser:
        self.calls.append(token)
        if token == "token-outage":
            raise IdentityUnavailableError("Authentication service unavailable. Please try again.")
        if token not in TOKENS:
            raise SessionExpiredError("Invalid or expired session. Please log in again.")
        return TOKENS[token]


class FakeStorage:
    bucket_name = "test-bucket"

    def __init__(self):
        self.objects: Dict[str, dict] = {}
        self.calls: List[tuple] = []
        self.fail_with: Optional[Exception] = None
        self._counter = 0

    def _maybe_fail(self):
        if self.fail_with is not None:
            raise self.fail_with

    async def upload_object(self, object_name, data, content_type, metadata=None):
        self.calls.append(("upload", object_name))
        self._maybe_fail()
        self.objects[object_name] = {
            "data": data,
            "content_type": content_type,
            "metadata": metadata,
        }

    async def generate_presigned_url(self, object_name, expires_in, content_disposition=None):
        self.calls.append(("sign", object_name, expires_in, content_disposition))
        self._maybe_fail()
        self._counter += 1
        return f"https://storage.test/{self.bucket_name}/{object_name}?sig={self._counter}&exp={expires_in}"

    async def delete_object(self, object_name):
        self.calls.append(("delete", object_name))
        self._maybe_fail()
        self.objects.pop(object_name, None)

    async def check_connection(self):
        self._maybe_fail()


class FakeDocuments:
    def __init__(self):
        self.records: Dict[str, DocumentRecord] = {}
        self.users: Dict[str, UserRecord] = {ADMIN: UserRecord(id=ADMIN, role="admin")}
        self.lookups: List[str] = []
        self.deleted: List[str] = []

    @property
    def available(self) -> bool:
        return True

    def add(self, file_key: str, uploaded_by: str):
        self.records[file_key] = DocumentRecord(file_key=file_key, uploaded_by=uploaded_by)

    async def find_by_file_key(self, file_key):
        self.lookups.append(file_key)
        return self.records.get(file_key)

    async def find_user(self, user_id):
        return self.users.get(user_id)

    async def delete_by_file_key(self, file_key):
        self.deleted.append(file_key)
        return self.records.pop(file_key, None) is not None


@pytest.fixture
def test_settings():
    return Settings(
        STORAGE_ACCESS_KEY="access",
        STORAGE_SECRET_KEY="secret",
        STORAGE_BUCKET="test-bucket",
        IDENTITY_URL="https://identity.test",
        IDENTITY_SERVICE_KEY="service-key",
        MAX_UPLOAD_SIZE=1024,
        _env_file=None,
    )


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def documents():
    return FakeDocuments()


@pytest.fixture
def verifier():
    return FakeVerifier()


@pytest.fixture
def client(test_settings, storage, documents, verifier):
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_document_repository] = lambda: documents
    app.dependency_overrides[get_identity_verifier] = lambda: verifier
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


def auth(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
