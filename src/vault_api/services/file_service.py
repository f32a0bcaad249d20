"""
File operations on top of an object store.

Uploads are deduplicated by SHA-256: before writing, every stored object's
checksum metadata is compared to the new content's. The scan and the write
are separate store calls, so two concurrent uploads of the same bytes can
both be stored.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, List, Optional

from vault_api.adapters.storage import ObjectHead, ObjectStore
from vault_api.errors import DuplicateContentError, StoredFileNotFoundError
from vault_api.schemas import FileInfo
from vault_api.utils.decorators import log_execution_time
from vault_api.utils.files import (
    DEFAULT_CONTENT_TYPE,
    calculate_checksum,
    choose_storage_key,
    parse_metadata,
    parse_timestamp,
    utc_now_iso,
)

logger = logging.getLogger(__name__)


@dataclass
class FileDownload:
    """Everything needed to send a stored file back to a client."""
    key: str
    filename: str
    content_type: str
    etag: str
    size: int
    last_modified: datetime
    body: Optional[Iterator[bytes]] = None


def to_file_info(head: ObjectHead) -> FileInfo:
    """Build the API descriptor of an object, applying metadata fallbacks."""
    metadata = parse_metadata(head.key, head.metadata, head.uploaded)
    return FileInfo(
        key=head.key,
        name=metadata["name"],
        size=head.size,
        content_type=metadata["content_type"],
        uploaded_at=metadata["uploaded_at"],
        checksum=metadata["checksum"],
    )


class FileService:
    """Upload, list, download and delete files kept in an ``ObjectStore``."""

    def __init__(self, store: ObjectStore):
        self.store = store

    def find_by_checksum(self, checksum: str) -> Optional[ObjectHead]:
        """Return the first stored object whose checksum metadata matches."""
        for key in self.store.list():
            head = self.store.head(key)
            if head is not None and head.metadata.get("checksum") == checksum:
                return head
        return None

    @log_execution_time(logger_name=__name__)
    def upload(self, data: bytes, filename: str, content_type: Optional[str] = None) -> FileInfo:
        """
        Store a new file unless identical content already exists.

        :param data: The full file content.
        :param filename: Original filename, used as the key when it is free.
        :param content_type: MIME type sent by the client.
        :raises DuplicateContentError: if an object with the same checksum exists.
        :return: Descriptor of the newly stored file.
        """
        checksum = calculate_checksum(data)

        existing = self.find_by_checksum(checksum)
        if existing is not None:
            logger.info(f"Rejected upload of {filename}: same content as {existing.key}")
            raise DuplicateContentError(to_file_info(existing))

        name_taken = self.store.head(filename) is not None
        storage_key = choose_storage_key(filename, name_taken)
        if name_taken:
            logger.info(f"Name {filename} already in use, storing as {storage_key}")

        content_type = content_type or DEFAULT_CONTENT_TYPE
        uploaded_at = utc_now_iso()
        self.store.put(
            storage_key,
            data,
            content_type=content_type,
            metadata={
                "originalName": filename,
                "contentType": content_type,
                "uploadedAt": uploaded_at,
                "checksum": checksum,
            },
        )
        logger.info(f"Stored {filename} as {storage_key} ({len(data)} bytes)")

        return FileInfo(
            key=storage_key,
            name=filename,
            size=len(data),
            content_type=content_type,
            uploaded_at=uploaded_at,
            checksum=checksum,
        )

    @log_execution_time(logger_name=__name__)
    def list_files(self) -> List[FileInfo]:
        """Return every stored file, newest upload first."""
        files = []
        for key in self.store.list():
            head = self.store.head(key)
            if head is None:
                # deleted between list and head
                continue
            files.append(to_file_info(head))

        files.sort(key=lambda info: parse_timestamp(info.uploaded_at), reverse=True)
        return files

    def describe(self, key: str) -> FileDownload:
        """Resolve the download headers of a file without reading its body."""
        head = self.store.head(key)
        if head is None:
            raise StoredFileNotFoundError()
        return self._to_download(head)

    def download(self, key: str) -> FileDownload:
        stored = self.store.get(key)
        if stored is None:
            logger.info(f"Download of missing key {key}")
            raise StoredFileNotFoundError()
        download = self._to_download(stored)
        download.body = stored.body
        return download

    def delete(self, key: str) -> None:
        if self.store.head(key) is None:
            logger.info(f"Delete of missing key {key}")
            raise StoredFileNotFoundError()
        self.store.delete(key)
        logger.info(f"Deleted {key}")

    @staticmethod
    def _to_download(head: ObjectHead) -> FileDownload:
        return FileDownload(
            key=head.key,
            filename=head.metadata.get("originalName") or head.key,
            content_type=head.content_type or DEFAULT_CONTENT_TYPE,
            etag=head.etag,
            size=head.size,
            last_modified=head.uploaded,
        )
