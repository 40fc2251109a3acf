"""
Exception, request-logging and performance middlewares for the ATS Scorer API
"""
import time
import traceback
import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from ats_scorer.utils.exceptions import ScorerBaseException, map_to_http_exception
from ats_scorer.utils.logging_config import get_logger

logger = get_logger(__name__)


def error_response(request_id: str, status_code: int, detail: Any) -> JSONResponse:
    """Standard error envelope: {success, timestamp, request_id, status_code, error, message}"""
    if isinstance(detail, str):
        detail = {"error": detail, "message": detail}
    elif not isinstance(detail, dict):
        detail = {"error": str(detail), "message": str(detail)}

    content = {
        "success": False,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": request_id,
        "status_code": status_code,
        **detail,
    }
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(content),
        headers={"X-Request-ID": request_id},
    )


class ExceptionHandlerMiddleware(BaseHTTPMiddleware):
    """Turns every exception escaping a route into the error envelope"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        context = {"request_id": request_id, "method": request.method, "path": request.url.path}

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response

        except ScorerBaseException as exc:
            log = logger.warning if exc.error_code in ("VALIDATION_ERROR", "NOT_FOUND") else logger.error
            log(
                f"{exc.__class__.__name__} in {request.method} {request.url.path}: {exc.message}",
                extra={**context, "error_code": exc.error_code},
            )
            http_exc = map_to_http_exception(exc)
            return error_response(request_id, http_exc.status_code, http_exc.detail)

        except RequestValidationError as exc:
            logger.warning(f"Request validation failed for {request.url.path}", extra=context)
            return error_response(request_id, 422, {
                "error": "Validation failed",
                "message": "Request data validation failed",
                "validation_errors": exc.errors(),
            })

        except ValidationError as exc:
            logger.error(f"Data validation failed in {request.url.path}: {exc}", extra=context)
            return error_response(request_id, 400, {
                "error": "Data validation failed",
                "message": "Invalid data format or values",
                "validation_errors": exc.errors(include_url=False, include_context=False),
            })

        except HTTPException as exc:
            logger.warning(f"HTTP {exc.status_code} in {request.url.path}: {exc.detail}", extra=context)
            return error_response(request_id, exc.status_code, exc.detail)

        except Exception as exc:
            logger.error(
                f"Unhandled exception in {request.method} {request.url.path}: {exc}",
                extra={**context, "exception_type": exc.__class__.__name__, "traceback": traceback.format_exc()},
                exc_info=True,
            )
            # Internal details stay in the log
            return error_response(request_id, 500, {
                "error": "Internal server error",
                "message": "An unexpected error occurred. Please try again later.",
            })


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and timing; request bodies hold resume text so only their size is logged"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        request_id = getattr(request.state, "request_id", None) or str(uuid.uuid4())

        logger.debug(
            f"Request: {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "content_length": request.headers.get("content-length", "0"),
                "client_ip": request.client.host if request.client else "unknown",
            },
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"Request failed: {request.method} {request.url.path} after {time.time() - start_time:.3f}s",
                extra={"request_id": request_id, "exception": str(exc)},
            )
            raise

        logger.info(
            f"Response: {request.method} {request.url.path} - {response.status_code} "
            f"in {time.time() - start_time:.3f}s",
            extra={"request_id": request_id, "status_code": response.status_code},
        )
        return response


class PerformanceMiddleware(BaseHTTPMiddleware):
    """Flags slow requests and reports processing time in X-Processing-Time"""

    def __init__(self, app, slow_request_threshold: float = 2.0):
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        processing_time = time.time() - start_time

        if processing_time > self.slow_request_threshold:
            logger.warning(
                f"Slow request detected: {request.method} {request.url.path} took {processing_time:.3f}s",
                extra={"threshold": self.slow_request_threshold},
            )

        response.headers["X-Processing-Time"] = f"{processing_time:.3f}"
        return response
