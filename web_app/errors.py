"""Exception handlers rendering the error envelope."""

from contextlib import contextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortlinks.common.logging_config import get_logger
from shortlinks.errors import ShortLinkError, ServerError


logger = get_logger("shortlinks.web")


def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    """Build a `{"status": "error", "message": ...}` response."""
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message},
        headers=headers,
    )


@contextmanager
def unexpected_errors(message: str):
    """Turn anything that is not a ShortLinkError into a ServerError.

    The original exception is logged with its traceback; callers only
    ever see `message`.
    """
    try:
        yield
    except ShortLinkError:
        raise
    except Exception as e:
        logger.exception(f"{message}: {e}")
        raise ServerError(message) from e


async def short_link_error_handler(request: Request, exc: ShortLinkError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(exc.status_code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid request: {location} {first.get('msg', '')}".strip()
    else:
        message = "Invalid request"
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = "Resource not found"
    else:
        message = str(exc.detail)
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the envelope handlers to an app."""
    app.add_exception_handler(ShortLinkError, short_link_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
