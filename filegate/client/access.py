"""
Client for the file access gateway.

Every operation asks ``get_session_token`` for the current token right
before the request, so a session refreshed elsewhere is picked up on the
next call. Nothing is cached between calls.
"""
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx
from pydantic import BaseModel

from filegate.client.errors import (
    AccessDeniedError,
    FileAccessError,
    FileValidationError,
    SessionExpiredError,
)
from filegate.schemas.files import UploadResponse

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 50 * 1024 * 1024

ALLOWED_CONTENT_TYPES = frozenset({
    "application/pdf",
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
})

DEFAULT_EXPIRY = 3600

SessionTokenProvider = Callable[[], Awaitable[Optional[str]]]


class LocalFile(BaseModel):
    name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def file_key_from_url(url: str, bucket: str, endpoint: str) -> str:
    """Recover the object key from a legacy path-style URL ``https://{endpoint}/{bucket}/{key}``."""
    prefix = f"https://{endpoint.rstrip('/')}/{bucket}/"
    if not url.startswith(prefix) or len(url) == len(prefix):
        raise ValueError("Invalid storage URL format")
    return url[len(prefix):].split("?", 1)[0]


class FileAccessClient:
    def __init__(
        self,
        base_url: str,
        get_session_token: SessionTokenProvider,
        *,
        timeout: float = 30.0,
        upload_timeout: float = 300.0,
        max_file_size: int = MAX_FILE_SIZE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.get_session_token = get_session_token
        self.timeout = timeout
        self.upload_timeout = upload_timeout
        self.max_file_size = max_file_size
        self.transport = transport

    async def upload_file(self, file: LocalFile, user_id: str) -> UploadResponse:
        if file.size > self.max_file_size:
            raise FileValidationError(
                f"File size must be less than {self.max_file_size // (1024 * 1024)}MB",
                code="VALIDATION_ERROR",
            )
        if file.content_type not in ALLOWED_CONTENT_TYPES:
            raise FileValidationError(
                "File type not supported. Please upload PDF, DOC, DOCX, images, or text files.",
                code="VALIDATION_ERROR",
            )

        logger.debug("Uploading %s (%d bytes)", file.name, file.size)
        payload = await self._post(
            "/upload-file",
            files={"file": (file.name, file.data, file.content_type)},
            data={"userId": user_id},
            timeout=self.upload_timeout,
        )
        return UploadResponse(**payload)

    async def get_view_url(self, file_key: str, expires_in: int = DEFAULT_EXPIRY) -> str:
        payload = await self._post(
            "/get-signed-url",
            json={"fileKey": file_key, "expiresIn": expires_in, "download": False},
        )
        return payload["signedUrl"]

    async def get_download_url(
        self, file_key: str, file_name: str, expires_in: int = DEFAULT_EXPIRY
    ) -> str:
        payload = await self._post(
            "/get-signed-url",
            json={
                "fileKey": file_key,
                "fileName": file_name,
                "expiresIn": expires_in,
                "download": True,
            },
        )
        return payload["signedUrl"]

    async def delete_file(self, file_key: str, purge_record: bool = False) -> bool:
        """
        Delete one file. Session errors propagate so the caller can force a
        new sign-in; any other failure is logged and reported as ``False``.
        """
        try:
            payload = await self._post(
                "/delete-file",
                json={"fileKey": file_key, "purgeRecord": purge_record},
            )
        except SessionExpiredError:
            raise
        except FileAccessError as e:
            logger.warning("Delete of %s failed: %s", file_key, e.message)
            return False
        if payload.get("warning"):
            logger.warning("Delete of %s reported: %s", file_key, payload["warning"])
        return True

    async def _authorization_header(self) -> Dict[str, str]:
        token = await self.get_session_token()
        if not token:
            raise SessionExpiredError("No active session. Please log in again.", code="SESSION_EXPIRED")
        return {"Authorization": f"Bearer {token}"}

    async def _post(self, path: str, timeout: Optional[float] = None, **kwargs: Any) -> Dict[str, Any]:
        headers = await self._authorization_header()
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=timeout or self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.post(path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise FileAccessError(f"Request to {path} failed: {e}", code="NETWORK_ERROR") from e
        return self._parse(response)

    @staticmethod
    def _parse(response: httpx.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if response.is_success and payload.get("success"):
            return payload

        message = payload.get("error") or f"Request failed with status {response.status_code}"
        code = payload.get("code")
        if response.status_code == 401 or code == "SESSION_EXPIRED":
            raise SessionExpiredError(message, response.status_code, code)
        if response.status_code == 403:
            raise AccessDeniedError(message, response.status_code, code)
        raise FileAccessError(message, response.status_code, code)
