from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from filegate.core.errors import AccessDeniedError
from filegate.models.document import DocumentRecord
from filegate.models.user import AuthenticatedUser, UserRecord
from filegate.services.access import verify_file_access
from filegate.services.documents import DocumentRepository

OWNER = AuthenticatedUser(id="owner")
OTHER = AuthenticatedUser(id="other")
KEY = "documents/owner/1_abc_file.pdf"


def repository(record=None, user=None, error=None):
    repo = AsyncMock(spec=DocumentRepository)
    if error is not None:
        repo.find_by_file_key.side_effect = error
    else:
        repo.find_by_file_key.return_value = record
    repo.find_user.return_value = user
    return repo


@pytest.mark.asyncio
async def test_fast_path_skips_lookup():
    repo = repository()

    await verify_file_access(KEY, OWNER, repo, action="delete")

    repo.find_by_file_key.assert_not_called()


@pytest.mark.asyncio
async def test_record_fallback_grants_owner():
    repo = repository(record=DocumentRecord(file_key="old/key.pdf", uploaded_by="other"))

    await verify_file_access("old/key.pdf", OTHER, repo, action="delete")

    repo.find_by_file_key.assert_awaited_once_with("old/key.pdf")


@pytest.mark.asyncio
async def test_missing_record_denies():
    with pytest.raises(AccessDeniedError) as exc_info:
        await verify_file_access(KEY, OTHER, repository(), action="delete")

    assert "delete this file" in exc_info.value.message


@pytest.mark.asyncio
async def test_record_without_owner_denies():
    record = DocumentRecord(file_key=KEY, uploaded_by=None)

    with pytest.raises(AccessDeniedError):
        await verify_file_access(KEY, OTHER, repository(record=record), action="delete")


@pytest.mark.asyncio
async def test_lookup_error_denies():
    repo = repository(error=ServerSelectionTimeoutError("no servers"))

    with pytest.raises(AccessDeniedError):
        await verify_file_access(KEY, OTHER, repo, action="view", allow_admin=True)


@pytest.mark.asyncio
async def test_admin_only_when_allowed():
    admin = UserRecord(id="other", role="admin")

    await verify_file_access(KEY, OTHER, repository(user=admin), action="view", allow_admin=True)

    with pytest.raises(AccessDeniedError):
        await verify_file_access(KEY, OTHER, repository(user=admin), action="delete")


@pytest.mark.asyncio
async def test_student_role_gets_no_admin_access():
    student = UserRecord(id="other", role="student")

    with pytest.raises(AccessDeniedError):
        await verify_file_access(KEY, OTHER, repository(user=student), action="view", allow_admin=True)


def mongo_repository(document=None, user=None):
    db = MagicMock()
    db.documents.find_one = AsyncMock(return_value=document)
    db.users.find_one = AsyncMock(return_value=user)
    return DocumentRepository(db)


@pytest.mark.asyncio
async def test_malformed_user_record_denies():
    repo = mongo_repository(user={"id": "other", "role": None})

    with pytest.raises(AccessDeniedError):
        await verify_file_access(KEY, OTHER, repo, action="view", allow_admin=True)


@pytest.mark.asyncio
async def test_malformed_document_record_denies():
    repo = mongo_repository(document={"file_key": KEY, "uploaded_by": {"id": "other"}})

    with pytest.raises(AccessDeniedError):
        await verify_file_access(KEY, OTHER, repo, action="delete")
