from typing import Optional


class FileAccessError(Exception):
    """A gateway call failed. ``code`` mirrors the gateway's error code when there is one."""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class SessionExpiredError(FileAccessError):
    """The session is gone or was rejected; the user has to sign in again."""


class AccessDeniedError(FileAccessError):
    pass


class FileValidationError(FileAccessError):
    """Rejected locally before any request was sent."""
