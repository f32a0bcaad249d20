"""CORS handling for the JSON API."""

from fastapi import Request, Response, status

API_PREFIX = "/api"
PREFLIGHT_MAX_AGE = "86400"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def is_api_path(path: str) -> bool:
    return path == API_PREFIX or path.startswith(API_PREFIX + "/")


def preflight_response() -> Response:
    return Response(
        status_code=status.HTTP_204_NO_CONTENT,
        headers={**CORS_HEADERS, "Access-Control-Max-Age": PREFLIGHT_MAX_AGE},
    )


async def apply_cors_headers(request: Request, call_next):
    """Answer API preflights and let any origin read API responses, errors included."""
    if not is_api_path(request.url.path):
        return await call_next(request)

    if request.method == "OPTIONS":
        return preflight_response()

    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response
