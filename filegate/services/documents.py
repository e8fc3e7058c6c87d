import logging
from typing import Optional

from fastapi import Depends

from filegate.core.database import get_db
from filegate.models.document import DocumentRecord
from filegate.models.user import UserRecord

logger = logging.getLogger(__name__)


class DocumentRepository:
    """Read access to document and user records kept by the portal."""

    def __init__(self, db):
        self.db = db

    @property
    def available(self) -> bool:
        return self.db is not None

    async def find_by_file_key(self, file_key: str) -> Optional[DocumentRecord]:
        if not self.available:
            logger.warning("Document store unavailable, cannot look up %s", file_key)
            return None
        data = await self.db.documents.find_one({"file_key": file_key})
        if not data:
            return None
        return DocumentRecord(**data)

    async def find_user(self, user_id: str) -> Optional[UserRecord]:
        if not self.available:
            return None
        data = await self.db.users.find_one({"id": user_id})
        if not data:
            return None
        return UserRecord(**data)

    async def delete_by_file_key(self, file_key: str) -> bool:
        if not self.available:
            return False
        result = await self.db.documents.delete_one({"file_key": file_key})
        return result.deleted_count > 0


async def get_document_repository(db=Depends(get_db)) -> DocumentRepository:
    return DocumentRepository(db)
