"""
Storage API service layer.

Business logic for file uploads with checksum deduplication, listing,
downloads and deletion, independent of the object-store backend.
"""

from .file_service import FileDownload, FileService, to_file_info

__all__ = ['FileDownload', 'FileService', 'to_file_info']
