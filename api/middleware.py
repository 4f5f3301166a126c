"""
Consolidated middleware for the MyMixes API
"""

import time
import logging
from uuid import uuid4

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.exceptions import ServiceError

logger = logging.getLogger("mymixes.middleware")


# ============================================================================
# Helper Functions
# ============================================================================


def format_validation_errors(errors) -> list:
    """Reduce pydantic error dicts to path/message/type triples.

    The raw ``ctx`` entries may hold exception objects, so they are dropped.
    """
    issues = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        # Leading "body"/"query"/"path" tells where, not what
        if loc and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        issues.append(
            {
                "path": ".".join(loc),
                "message": err.get("msg", ""),
                "type": err.get("type", ""),
            }
        )
    return issues


# ============================================================================
# Request Logging Middleware
# ============================================================================


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all HTTP requests and responses"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        request.state.request_id = request_id

        logger.info(
            "Request started",
            extra={
                "request_id": request_id,
                "method": request.method,
                "url": str(request.url),
                "client": request.client.host if request.client else None,
            },
        )

        start_time = time.time()

        try:
            response: Response = await call_next(request)
            process_time = time.time() - start_time

            logger.info(
                "Request completed",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "url": str(request.url),
                    "status_code": response.status_code,
                    "process_time": f"{process_time:.4f}s",
                },
            )

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = f"{process_time:.4f}"

            return response

        except Exception as exc:
            process_time = time.time() - start_time
            logger.error(
                "Request failed",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "url": str(request.url),
                    "error": str(exc),
                    "process_time": f"{process_time:.4f}s",
                },
                exc_info=True,
            )
            raise


# ============================================================================
# Error Handlers
# ============================================================================


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request shape errors as 400 with a list of issues"""
    issues = format_validation_errors(exc.errors())
    logger.warning(f"Validation error on {request.url}: {issues}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": issues},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions"""
    logger.warning(f"HTTP {exc.status_code} on {request.url}: {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def service_exception_handler(request: Request, exc: ServiceError):
    """Handle errors raised by services and dependencies"""
    if exc.http_status >= 500:
        logger.error(f"Service error on {request.url}: {exc}")
    else:
        logger.warning(f"Service error {exc.http_status} on {request.url}: {exc}")

    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


async def integrity_exception_handler(request: Request, exc: IntegrityError):
    """Unique constraint violations that slipped past the services"""
    logger.warning(f"Integrity error on {request.url}: {exc.orig}")

    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"error": "Unique constraint failed"},
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors"""
    logger.exception(f"Unexpected error on {request.url}: {str(exc)}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Server error"},
    )
