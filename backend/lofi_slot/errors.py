"""Error codes and exceptions for the engine and the HTTP surface."""
from enum import Enum

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from lofi_slot.config import settings


class ErrorCode(str, Enum):
    """Error codes."""

    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_BET = "INVALID_BET"
    INVALID_CONFIG = "INVALID_CONFIG"
    INSUFFICIENT_CREDITS = "INSUFFICIENT_CREDITS"
    ROUND_IN_PROGRESS = "ROUND_IN_PROGRESS"
    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.INVALID_BET: 400,
    ErrorCode.INVALID_CONFIG: 500,
    ErrorCode.INSUFFICIENT_CREDITS: 402,
    ErrorCode.ROUND_IN_PROGRESS: 409,
    ErrorCode.INTERNAL_ERROR: 500,
}

# Recoverable errors clear up on their own (a spin finishes, credits change)
ERROR_RECOVERABLE: dict[ErrorCode, bool] = {
    ErrorCode.INVALID_REQUEST: False,
    ErrorCode.INVALID_BET: False,
    ErrorCode.INVALID_CONFIG: False,
    ErrorCode.INSUFFICIENT_CREDITS: True,
    ErrorCode.ROUND_IN_PROGRESS: True,
    ErrorCode.INTERNAL_ERROR: True,
}


class ErrorBody(BaseModel):
    """Error body shape."""

    code: str
    message: str
    recoverable: bool


class ErrorResponse(BaseModel):
    """Full error response."""

    protocolVersion: str = settings.protocol_version
    error: ErrorBody


class GameError(Exception):
    """Base game error that maps to a protocol error response."""

    def __init__(self, code: ErrorCode, message: str | None = None):
        self.code = code
        self.message = message or f"Error: {code.value}"
        self.status_code = ERROR_HTTP_STATUS[code]
        self.recoverable = ERROR_RECOVERABLE[code]
        super().__init__(self.message)

    def to_response(self) -> JSONResponse:
        """Convert to JSONResponse."""
        return JSONResponse(
            status_code=self.status_code,
            content=ErrorResponse(
                error=ErrorBody(
                    code=self.code.value,
                    message=self.message,
                    recoverable=self.recoverable,
                )
            ).model_dump(),
        )


class InsufficientCredits(GameError):
    """Spin cost exceeds the current credits."""

    def __init__(self, cost: int, credits: int):
        self.cost = cost
        self.credits = credits
        super().__init__(
            ErrorCode.INSUFFICIENT_CREDITS,
            f"Spin costs {cost} but only {credits} credits are available.",
        )


class AlreadySpinning(GameError):
    """A spin was requested while another one is still in flight."""

    def __init__(self):
        super().__init__(ErrorCode.ROUND_IN_PROGRESS, "A spin is already in progress.")


class InvalidBet(GameError):
    """Bet outside the allowed range."""

    def __init__(self, message: str):
        super().__init__(ErrorCode.INVALID_BET, message)
