from fastapi import Depends, Request

from vault_api.adapters.storage import ObjectStore
from vault_api.services.file_service import FileService


def get_store(request: Request) -> ObjectStore:
    """Object store dependency, built once in ``create_app``."""
    return request.app.state.store


def get_file_service(store: ObjectStore = Depends(get_store)) -> FileService:
    return FileService(store)
