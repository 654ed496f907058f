"""Middleware for error handling."""
import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from lofi_slot.errors import ErrorCode, GameError

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Convert GameError exceptions to protocol-compliant responses."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except GameError as e:
            return e.to_response()
        except Exception as e:
            logger.exception("Unhandled error on %s", request.url.path)
            error = GameError(ErrorCode.INTERNAL_ERROR, str(e))
            return error.to_response()
