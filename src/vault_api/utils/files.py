"""Helpers for content checksums, storage key naming and metadata fallbacks."""

import hashlib
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def calculate_checksum(data: bytes) -> str:
    """
    Calculate the SHA-256 checksum of a file.

    :param data: The full file content.
    :return: Lowercase hex-encoded digest.
    """
    return hashlib.sha256(data).hexdigest()


def format_timestamp(moment: datetime) -> str:
    """Render a datetime as ISO-8601 UTC with milliseconds and a ``Z`` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    return format_timestamp(datetime.now(timezone.utc))


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware datetime.

    Unparseable values sort as the oldest possible moment.
    """
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return datetime.min.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def generate_timestamped_key(filename: str, now: Optional[datetime] = None) -> str:
    """
    Generate a storage key with an ISO timestamp appended before the extension.

    ``report.pdf`` becomes ``report_2026-01-22T10-30-45-123Z.pdf`` and
    ``README`` becomes ``README_2026-01-22T10-30-45-123Z``.

    :param filename: The original filename.
    :param now: Moment to stamp, defaults to the current time.
    """
    stamp = format_timestamp(now or datetime.now(timezone.utc))
    stamp = stamp.replace(":", "-").replace(".", "-")

    last_dot = filename.rfind(".")
    if last_dot == -1:
        return f"{filename}_{stamp}"

    name, extension = filename[:last_dot], filename[last_dot:]
    return f"{name}_{stamp}{extension}"


def choose_storage_key(filename: str, name_taken: bool, now: Optional[datetime] = None) -> str:
    """Use the filename as the key unless another object already holds it."""
    if name_taken:
        return generate_timestamped_key(filename, now)
    return filename


def parse_metadata(key: str, metadata: Optional[Mapping[str, str]], uploaded: datetime) -> Dict[str, str]:
    """
    Resolve custom metadata of a stored object, falling back for missing fields.

    :param key: The object key, used when no original name was recorded.
    :param metadata: Custom metadata as stored alongside the object.
    :param uploaded: Creation timestamp reported by the store.
    """
    metadata = metadata or {}
    return {
        "name": metadata.get("originalName") or key,
        "content_type": metadata.get("contentType") or DEFAULT_CONTENT_TYPE,
        "uploaded_at": metadata.get("uploadedAt") or format_timestamp(uploaded),
        "checksum": metadata.get("checksum") or "",
    }
