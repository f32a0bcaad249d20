from textwrap import dedent
import logging
from typing import Optional

import pydantic
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from vault_api.adapters.storage import ObjectStore, StorageFactory
from vault_api.config.settings import Settings
from vault_api.errors import (
    FileStoreError,
    handle_broad_exceptions,
    handle_file_store_errors,
    handle_http_exceptions,
    handle_pydantic_validation_errors,
)
from vault_api.middleware import API_PREFIX, apply_cors_headers
from vault_api.routers.files import router as files_router
from vault_api.routers.health import router as health_router

# Set up logging
logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, store: Optional[ObjectStore] = None) -> FastAPI:
    """
    Create a FastAPI application.

    :param settings: Application settings, read from the environment when omitted.
    :param store: Object store to serve files from. When omitted one is built
        for ``settings.deployment_mode``.
    """
    settings = settings or Settings()

    app = FastAPI(
        title="Secret Cloud Storage",
        summary="Upload, deduplicate and download files",
        version="v1",
        description=dedent(
            """\
        Files are deduplicated by SHA-256 checksum. Uploading content that is
        already stored returns `409` with the existing file; uploading new
        content under a name already in use stores it under a timestamped key.

        | Helpful Links | Notes |
        | --- | --- |
        | [FastAPI Documentation](https://fastapi.tiangolo.com/) | |
        | [Browser client](/) | drag-and-drop uploads |
        """
        ),
        docs_url="/docs",
        generate_unique_id_function=custom_generate_unique_id,
    )

    app.state.settings = settings
    app.state.store = store if store is not None else StorageFactory.get_store(settings)
    logger.info(f"Serving files from {type(app.state.store).__name__}")

    app.include_router(files_router, prefix=API_PREFIX, tags=["files"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(FileStoreError, handle_file_store_errors)
    app.add_exception_handler(StarletteHTTPException, handle_http_exceptions)
    app.add_exception_handler(RequestValidationError, handle_pydantic_validation_errors)
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.middleware("http")(handle_broad_exceptions)
    # outermost, so 500s from the broad handler carry CORS headers too
    app.middleware("http")(apply_cors_headers)

    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}" if route.tags else route.name


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=8000)
