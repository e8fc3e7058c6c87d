"""
File key construction and parsing.

Keys look like ``documents/{owner_id}/{millis}_{token}_{name}``. The owner
segment is written from the verified caller identity, so a matching segment
is enough to prove ownership without a document-store lookup.
"""
import re
import time
import uuid
from typing import Optional

KEY_PREFIX = "documents"

_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")
_UNSAFE_DISPOSITION_CHARS = re.compile(r'["\\\x00-\x1f\x7f]')


def sanitize_file_name(file_name: str) -> str:
    return _UNSAFE_NAME_CHARS.sub("_", file_name)


def build_file_key(owner_id: str, file_name: str, timestamp_ms: Optional[int] = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    token = uuid.uuid4().hex[:12]
    return f"{KEY_PREFIX}/{owner_id}/{timestamp_ms}_{token}_{sanitize_file_name(file_name)}"


def is_well_formed(file_key: str) -> bool:
    if not file_key or file_key.startswith("/"):
        return False
    return all(segment not in ("", ".", "..") for segment in file_key.split("/"))


def owner_from_file_key(file_key: str) -> Optional[str]:
    """Owner segment of a conventional key, or None for keys outside the convention."""
    parts = file_key.split("/")
    if len(parts) < 3 or parts[0] != KEY_PREFIX or not parts[1]:
        return None
    return parts[1]


def attachment_disposition(file_name: str) -> str:
    return f'attachment; filename="{_UNSAFE_DISPOSITION_CHARS.sub("_", file_name)}"'
