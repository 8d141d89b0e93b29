import logging
import time
from logging.handlers import RotatingFileHandler
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger("apps.billing.requests")


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure the root logger once for the API process.

    A stream handler is always installed; a rotating file handler is added
    when `log_file` is set. Handler errors are reported to stderr by the
    logging module and never propagate into request handling.
    """
    logging.raiseExceptions = False

    root = logging.getLogger()
    root.setLevel(level.upper())
    formatter = logging.Formatter(LOG_FORMAT)

    if not any(getattr(h, "_billing", False) for h in root.handlers):
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        stream_handler._billing = True
        root.addHandler(stream_handler)

        if log_file:
            try:
                file_handler = RotatingFileHandler(log_file, maxBytes=2 * 1024 * 1024, backupCount=10)
            except OSError:
                root.warning("Could not open log file %s; logging to stream only.", log_file)
            else:
                file_handler.setFormatter(formatter)
                file_handler._billing = True
                root.addHandler(file_handler)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        # an exception escaping the app is answered with 500 further out
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                "%s %s -> %s (%.1f ms)",
                request.method,
                request.url.path,
                status_code,
                elapsed_ms,
            )
