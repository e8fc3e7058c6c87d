import logging

import pydantic
from pymongo.errors import PyMongoError

from filegate.core.errors import AccessDeniedError
from filegate.models.user import AuthenticatedUser
from filegate.services.documents import DocumentRepository
from filegate.services.keys import owner_from_file_key

logger = logging.getLogger(__name__)


async def verify_file_access(
    file_key: str,
    user: AuthenticatedUser,
    documents: DocumentRepository,
    action: str,
    allow_admin: bool = False,
) -> None:
    """
    Two-tier ownership check.

    The owner segment of the key is checked first; only when it does not
    name the caller is the document record consulted. ``allow_admin`` lets
    callers with the admin role through as well (read access only).

    Raises:
        AccessDeniedError: if neither tier proves the caller may act on the key.
    """
    key_owner = owner_from_file_key(file_key)
    if key_owner == user.id:
        return

    try:
        record = await documents.find_by_file_key(file_key)
        if record is not None and record.uploaded_by == user.id:
            logger.info("Ownership of %s confirmed by document record", file_key)
            return
        if allow_admin:
            caller = await documents.find_user(user.id)
            if caller is not None and caller.is_admin:
                logger.info("Admin %s granted %s access to %s", user.id, action, file_key)
                return
    except (PyMongoError, pydantic.ValidationError) as e:
        logger.error("Document lookup failed for %s: %s", file_key, e)

    logger.warning(
        "File ownership verification failed: key=%s requested_by=%s key_owner=%s",
        file_key,
        user.id,
        key_owner,
    )
    raise AccessDeniedError(f"Access denied: You do not have permission to {action} this file")
