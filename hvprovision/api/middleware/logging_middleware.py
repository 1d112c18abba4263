"""Logging middleware for FastAPI."""
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from hvprovision.infrastructure.logging.logger import get_logger


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with an id that is echoed in ``X-Request-ID``."""

    def __init__(self, app):
        super().__init__(app)
        self.logger = get_logger(__name__)

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        client_ip = request.client.host if request.client else "unknown"
        log = self.logger.bind(request_id=request_id, method=request.method, path=request.url.path)

        log.info("Request received", client=client_ip)
        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception as e:
            log.error("Request failed", error=f"{type(e).__name__}: {e}", duration=round(time.time() - start_time, 3))
            raise

        log.info("Response sent", status=response.status_code, duration=round(time.time() - start_time, 3))
        response.headers["X-Request-ID"] = request_id
        return response
