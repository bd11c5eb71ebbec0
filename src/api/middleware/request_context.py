"""Request ID and access logging."""

import logging
import time
import uuid

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from api.error_handlers import INTERNAL_ERROR_MESSAGE, error_body

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID and log it once on completion.

    Exceptions no handler claimed are answered here with the opaque 500
    envelope, so those responses keep the request ID and CORS headers.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Unhandled exception on {request.url.path}: {e}",
                exc_info=e,
                extra={"request_id": request_id},
            )
            response = JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=error_body(INTERNAL_ERROR_MESSAGE),
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info("Request completed", extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            "client_ip": request.client.host if request.client else None,
        })
        return response
