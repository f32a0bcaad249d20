"""
Object-store adapters.

The service only needs put/get/head/list/delete with per-object string
metadata. ``InMemoryObjectStore`` backs local development and tests,
``S3ObjectStore`` talks to S3 (or a moto server) through boto3.
"""

import hashlib
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional, Protocol, runtime_checkable
from urllib.parse import quote, unquote

import boto3

from vault_api.config.settings import Settings
from vault_api.s3.delete_objects import delete_s3_object
from vault_api.s3.read_objects import (
    bucket_exists,
    fetch_s3_object,
    head_s3_object,
    iter_s3_object_keys,
)
from vault_api.s3.write_objects import upload_s3_object
from vault_api.utils.files import DEFAULT_CONTENT_TYPE

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

logger = logging.getLogger(__name__)

CANONICAL_METADATA_KEYS = ("originalName", "contentType", "uploadedAt", "checksum")
# S3 metadata must be ASCII, so free-form values are percent-encoded
PERCENT_ENCODED_METADATA_KEYS = {"originalName"}
STREAM_CHUNK_SIZE = 64 * 1024


@dataclass
class ObjectHead:
    """What the store knows about an object, body excluded."""
    key: str
    size: int
    etag: str
    uploaded: datetime
    content_type: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass
class StoredObject(ObjectHead):
    """An object together with a stream over its payload."""
    body: Iterator[bytes] = field(default_factory=lambda: iter(()))


@runtime_checkable
class ObjectStore(Protocol):
    """Capability interface shared by every object-store backend."""

    def put(
        self,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> ObjectHead:
        """Store ``data`` under ``key``, replacing any existing object."""
        ...

    def get(self, key: str) -> Optional[StoredObject]:
        """Fetch an object with its body. ``None`` if the key does not exist."""
        ...

    def head(self, key: str) -> Optional[ObjectHead]:
        """Fetch an object's metadata only. ``None`` if the key does not exist."""
        ...

    def list(self) -> List[str]:
        """Return every key in the store."""
        ...

    def delete(self, key: str) -> None:
        """Remove an object. Missing keys are ignored."""
        ...

    def is_ready(self) -> bool:
        """Report whether the backend can serve requests."""
        ...


@dataclass
class _MemoryEntry:
    data: bytes
    etag: str
    uploaded: datetime
    content_type: Optional[str]
    metadata: Dict[str, str]


class InMemoryObjectStore:
    """Object store kept in a dict. Each call is atomic, nothing spans calls."""

    def __init__(self):
        self._objects: Dict[str, _MemoryEntry] = {}
        self._lock = threading.Lock()

    def put(self, key, data, content_type=None, metadata=None):
        entry = _MemoryEntry(
            data=bytes(data),
            etag=f'"{hashlib.md5(data).hexdigest()}"',
            uploaded=datetime.now(timezone.utc),
            content_type=content_type,
            metadata=dict(metadata or {}),
        )
        with self._lock:
            self._objects[key] = entry
        logger.debug(f"Stored {key} in memory ({len(data)} bytes)")
        return self._to_head(key, entry)

    def get(self, key):
        with self._lock:
            entry = self._objects.get(key)
        if entry is None:
            return None
        head = self._to_head(key, entry)
        return StoredObject(**vars(head), body=iter([entry.data]))

    def head(self, key):
        with self._lock:
            entry = self._objects.get(key)
        if entry is None:
            return None
        return self._to_head(key, entry)

    def list(self):
        with self._lock:
            return sorted(self._objects)

    def delete(self, key):
        with self._lock:
            self._objects.pop(key, None)

    def is_ready(self):
        return True

    def __len__(self):
        with self._lock:
            return len(self._objects)

    @staticmethod
    def _to_head(key: str, entry: _MemoryEntry) -> ObjectHead:
        return ObjectHead(
            key=key,
            size=len(entry.data),
            etag=entry.etag,
            uploaded=entry.uploaded,
            content_type=entry.content_type,
            metadata=dict(entry.metadata),
        )


def stream_and_close(body, chunk_size: int = STREAM_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield a ``StreamingBody`` in chunks and release its connection, even when abandoned."""
    try:
        yield from body.iter_chunks(chunk_size)
    finally:
        body.close()


def encode_s3_metadata(metadata: Dict[str, str]) -> Dict[str, str]:
    return {
        name: quote(value, safe="") if name in PERCENT_ENCODED_METADATA_KEYS else value
        for name, value in metadata.items()
    }


def decode_s3_metadata(metadata: Optional[Dict[str, str]]) -> Dict[str, str]:
    """Restore the canonical key casing S3 drops and undo percent-encoding."""
    canonical = {name.lower(): name for name in CANONICAL_METADATA_KEYS}
    decoded = {}
    for name, value in (metadata or {}).items():
        name = canonical.get(name.lower(), name)
        decoded[name] = unquote(value) if name in PERCENT_ENCODED_METADATA_KEYS else value
    return decoded


class S3ObjectStore:
    """Object store backed by a single S3 bucket."""

    def __init__(self, bucket_name: str, s3_client: Optional["S3Client"] = None):
        self.bucket_name = bucket_name
        self.s3_client = s3_client or boto3.client("s3")
        logger.info(f"S3ObjectStore initialized for bucket: {bucket_name}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3ObjectStore":
        s3_client = boto3.client(
            "s3",
            region_name=settings.aws_region,
            endpoint_url=settings.aws_endpoint_url,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
        )
        logger.info(f"  Endpoint: {settings.aws_endpoint_url}")
        logger.info(f"  Region: {settings.aws_region}")
        return cls(settings.s3_bucket_name, s3_client=s3_client)

    def put(self, key, data, content_type=None, metadata=None):
        content_type = content_type or DEFAULT_CONTENT_TYPE
        response = upload_s3_object(
            bucket_name=self.bucket_name,
            object_key=key,
            file_content=data,
            content_type=content_type,
            metadata=encode_s3_metadata(metadata or {}),
            s3_client=self.s3_client,
        )
        logger.debug(f"Uploaded {key} to s3://{self.bucket_name}")
        # PutObject returns no size or timestamp
        return ObjectHead(
            key=key,
            size=len(data),
            etag=response.get("ETag", ""),
            uploaded=datetime.now(timezone.utc),
            content_type=content_type,
            metadata=dict(metadata or {}),
        )

    def get(self, key):
        response = fetch_s3_object(self.bucket_name, key, s3_client=self.s3_client)
        if response is None:
            return None
        head = self._to_head(key, response)
        return StoredObject(**vars(head), body=stream_and_close(response["Body"]))

    def head(self, key):
        response = head_s3_object(self.bucket_name, key, s3_client=self.s3_client)
        if response is None:
            return None
        return self._to_head(key, response)

    def list(self):
        return list(iter_s3_object_keys(self.bucket_name, s3_client=self.s3_client))

    def delete(self, key):
        delete_s3_object(self.bucket_name, key, s3_client=self.s3_client)

    def is_ready(self):
        return bucket_exists(self.bucket_name, s3_client=self.s3_client)

    @staticmethod
    def _to_head(key: str, response) -> ObjectHead:
        return ObjectHead(
            key=key,
            size=response.get("ContentLength", 0),
            etag=response.get("ETag", ""),
            uploaded=response["LastModified"],
            content_type=response.get("ContentType"),
            metadata=decode_s3_metadata(response.get("Metadata")),
        )


class StorageFactory:
    """Factory to initialize the correct object store based on deployment mode"""

    @staticmethod
    def get_store(settings: Settings) -> ObjectStore:
        store_builders = {
            "local-dev": lambda: InMemoryObjectStore(),
            "aws-mock": lambda: S3ObjectStore.from_settings(settings),
            "aws-prod": lambda: S3ObjectStore.from_settings(settings),
        }

        deployment_mode = settings.deployment_mode
        if deployment_mode not in store_builders:
            raise ValueError(
                f"Invalid deployment_mode: {deployment_mode}. "
                f"Choose from {list(store_builders.keys())}"
            )

        logger.info(f"Creating object store for mode: {deployment_mode}")
        return store_builders[deployment_mode]()
