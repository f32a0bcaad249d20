import logging
from email.utils import format_datetime
from typing import Dict, Optional
from urllib.parse import quote

from fastapi import (
    APIRouter,
    Depends,
    File,
    HTTPException,
    Path,
    Response,
    UploadFile,
    status
)
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from vault_api.dependencies import get_file_service
from vault_api.errors import (
    BadRequestError,
    FileStoreError,
    InternalStoreError,
)
from vault_api.schemas import (
    DeleteFileResponse,
    ErrorResponse,
    ListFilesResponse,
    UploadResponse,
)
from vault_api.services.file_service import FileDownload, FileService

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


def content_disposition(filename: str) -> str:
    """Build an attachment header, adding an RFC 5987 form for non-ASCII names."""
    escaped = filename.replace("\\", "\\\\").replace('"', '\\"')
    if escaped.isascii():
        return f'attachment; filename="{escaped}"'
    fallback = escaped.encode("ascii", "replace").decode("ascii")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def download_headers(download: FileDownload) -> Dict[str, str]:
    headers = {
        "content-type": download.content_type,
        "content-length": str(download.size),
        "content-disposition": content_disposition(download.filename),
        "last-modified": format_datetime(download.last_modified, usegmt=True),
    }
    if download.etag:
        headers["etag"] = download.etag
    return headers


def require_key(key: str) -> str:
    if not key:
        raise BadRequestError("File key required")
    return key


@router.post(
    "/upload",
    status_code=status.HTTP_201_CREATED,
    response_model=UploadResponse,
    responses={
        status.HTTP_409_CONFLICT: {"model": UploadResponse},
        **ERROR_RESPONSES,
    },
)
async def upload_file(
    file: Optional[UploadFile] = File(None, description="The file to upload"),
    service: FileService = Depends(get_file_service),
) -> UploadResponse:
    """
    Upload a file, rejecting content that is already stored.

    Returns 201 with the stored file, or 409 with the file that already holds
    the same content. A name already in use by different content gets a
    timestamp appended to its key.
    """
    if file is None or not file.filename:
        raise BadRequestError("No file provided")

    try:
        data = await file.read()
        stored = await run_in_threadpool(service.upload, data, file.filename, file.content_type)
    except FileStoreError:
        raise
    except Exception as e:
        logger.exception(f"Upload error: {str(e)}")
        raise InternalStoreError.from_exception(e, "Upload failed")

    return UploadResponse(success=True, message="File uploaded successfully", file=stored)


@router.get("/files", response_model=ListFilesResponse, responses=ERROR_RESPONSES)
def list_files(service: FileService = Depends(get_file_service)) -> ListFilesResponse:
    """
    Retrieve every stored file, newest upload first.

    Returns:
        ListFilesResponse: files with metadata and their count
    """
    try:
        files = service.list_files()
    except Exception as e:
        logger.exception(f"List error: {str(e)}")
        raise InternalStoreError.from_exception(e, "Failed to list files")

    return ListFilesResponse(files=files, count=len(files))


@router.get("/files/{key:path}", responses=ERROR_RESPONSES)
def download_file(
    key: str = Path(..., description="The key of the file to download"),
    service: FileService = Depends(get_file_service),
):
    """
    Download a file from storage.

    The browser saves it under its original name.
    """
    require_key(key)
    try:
        download = service.download(key)
    except FileStoreError:
        raise
    except Exception as e:
        logger.exception(f"Download error: {str(e)}")
        raise InternalStoreError.from_exception(e, "Download failed")

    return StreamingResponse(download.body, headers=download_headers(download))


@router.head("/files/{key:path}", responses=ERROR_RESPONSES)
def get_file_metadata(
    key: str = Path(..., description="The key of the file to describe"),
    service: FileService = Depends(get_file_service),
) -> Response:
    """Return the headers a download would send, without the body."""
    require_key(key)
    try:
        download = service.describe(key)
    except FileStoreError:
        raise
    except Exception as e:
        logger.exception(f"Metadata error: {str(e)}")
        raise InternalStoreError.from_exception(e, "Failed to read file metadata")

    return Response(status_code=status.HTTP_200_OK, headers=download_headers(download))


@router.delete("/files/{key:path}", response_model=DeleteFileResponse, responses=ERROR_RESPONSES)
def delete_file(
    key: str = Path(..., description="The key of the file to delete"),
    service: FileService = Depends(get_file_service),
) -> DeleteFileResponse:
    """
    Delete a file from storage.

    Returns:
        DeleteFileResponse: Deletion confirmation
    """
    require_key(key)
    try:
        service.delete(key)
    except FileStoreError:
        raise
    except Exception as e:
        logger.exception(f"Delete error: {str(e)}")
        raise InternalStoreError.from_exception(e, "Deletion failed")

    return DeleteFileResponse(success=True, message="File deleted successfully")


@router.api_route(
    "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"],
    include_in_schema=False,
)
async def api_not_found(path: str):
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
