####################################
# --- Request/response schemas --- #
####################################

from typing import List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)
from pydantic.alias_generators import to_camel


class FileInfo(BaseModel):
    """Descriptor of a stored file."""
    key: str = Field(
        description="Storage key. Differs from the name when a timestamp was appended.",
        json_schema_extra={"example": "report_2026-01-22T10-30-45-123Z.pdf"},
    )
    name: str = Field(
        description="Original filename.",
        json_schema_extra={"example": "report.pdf"},
    )
    size: int = Field(description="The size of the file in bytes.", ge=0)
    content_type: str = Field(description="MIME type recorded at upload.")
    uploaded_at: str = Field(description="Upload timestamp (ISO 8601, UTC).")
    checksum: str = Field(description="Hex-encoded SHA-256 of the content.")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "key": "report.pdf",
                "name": "report.pdf",
                "size": 2456789,
                "contentType": "application/pdf",
                "uploadedAt": "2026-01-22T10:30:45.123Z",
                "checksum": "a1b2c3d4e5f6789012345678901234567890abcdef1234567890abcdef123456",
            }
        },
    )


class UploadResponse(BaseModel):
    """Response model for `POST /api/upload`."""
    success: bool
    message: str = Field(description="A message about the operation.")
    file: Optional[FileInfo] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "message": "File uploaded successfully",
                "file": FileInfo.model_config["json_schema_extra"]["example"],
            }
        }
    )


class ListFilesResponse(BaseModel):
    """Response model for `GET /api/files`."""
    files: List[FileInfo]
    count: int = Field(description="Total number of files.")


class DeleteFileResponse(BaseModel):
    """Response model for `DELETE /api/files/:key`."""
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Body of every error response."""
    success: bool = False
    error: str

    model_config = ConfigDict(
        json_schema_extra={"example": {"success": False, "error": "File not found"}}
    )
