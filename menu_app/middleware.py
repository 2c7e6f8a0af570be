"""
Request logging middleware and the HTML exception handlers.
"""

import logging
import time
from uuid import uuid4

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from menu_app.core.config import get_settings
from menu_app.exceptions import ForbiddenError, GuardRedirect, NotFoundError
from menu_app.templating import render

logger = logging.getLogger("menu_app.middleware")


# ============================================================================
# Request Logging Middleware
# ============================================================================


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its status and duration."""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        try:
            response: Response = await call_next(request)
        except Exception:
            logger.error(
                f"{request.method} {request.url.path} failed after "
                f"{time.time() - start_time:.4f}s [{request_id}]",
                exc_info=True,
            )
            raise

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} → {response.status_code} "
            f"in {process_time:.4f}s [{request_id}]"
        )
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response


# ============================================================================
# Error Handlers
# ============================================================================


async def guard_redirect_handler(request: Request, exc: GuardRedirect):
    logger.debug(f"Guard redirected {request.url.path} to {exc.location}")
    return RedirectResponse(exc.location, status_code=status.HTTP_303_SEE_OTHER)


async def forbidden_handler(request: Request, exc: ForbiddenError):
    return render(
        request,
        "forbidden.html",
        {"error_message": exc.message},
        status_code=status.HTTP_403_FORBIDDEN,
    )


async def not_found_handler(request: Request, exc: NotFoundError):
    logger.warning(f"Resource not found on {request.url.path}: {exc.message}")
    return render(
        request,
        "not_found.html",
        {"error_message": exc.message},
        status_code=status.HTTP_404_NOT_FOUND,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """A malformed path id cannot match any record, so it is a 404."""
    errors = exc.errors()
    logger.warning(f"Validation error on {request.url.path}: {errors}")

    if any(err.get("loc", ("",))[0] == "path" for err in errors):
        return await not_found_handler(request, NotFoundError("Page not found"))

    return render(
        request,
        "error.html",
        {"error_message": "The submitted form could not be read."},
        status_code=status.HTTP_400_BAD_REQUEST,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return await not_found_handler(request, NotFoundError("Page not found"))

    logger.warning(f"HTTP {exc.status_code} on {request.url.path}: {exc.detail}")
    return render(
        request,
        "error.html",
        {"error_message": exc.detail},
        status_code=exc.status_code,
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Infrastructure failures: log with traceback, show a generic page."""
    logger.exception(f"Unhandled exception on {request.url.path}: {exc}")

    detail = str(exc) if get_settings().debug else None
    return render(
        request,
        "error.html",
        {"error_message": "An unexpected error occurred. Please try again later.", "detail": detail},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
