"""Lofi Slot FastAPI application: one game session per process."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from lofi_slot.config import settings
from lofi_slot.errors import ErrorCode, GameError
from lofi_slot.logic.engine import GameController
from lofi_slot.middleware import ErrorHandlerMiddleware
from lofi_slot.protocol import (
    BetRequest,
    Configuration,
    InitResponse,
    LinesRequest,
    StateResponse,
)
from lofi_slot.telemetry import telemetry_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging on startup, drop pending spin timers on shutdown."""
    logging.basicConfig(level=settings.log_level)
    logger.info("Lofi Slot starting: credits=%d", controller.state.credits)
    yield
    controller.shutdown()


app = FastAPI(
    title="Lofi Slot",
    version="0.1.0",
    description="Spin resolution engine for a three-reel slot mini-game",
    lifespan=lifespan,
)

app.add_middleware(ErrorHandlerMiddleware)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies get the protocol error shape instead of FastAPI's 422."""
    error = GameError(ErrorCode.INVALID_REQUEST, f"Invalid request: {exc.errors()}")
    return error.to_response()


# The single live game session
controller = GameController()
telemetry_service.attach(controller)


def _state() -> dict:
    return StateResponse.from_snapshot(controller.snapshot()).model_dump()


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/init")
async def init() -> dict:
    """Configuration plus current state, for a UI that just loaded."""
    response = InitResponse(
        configuration=Configuration.from_settings(controller.config),
        state=StateResponse.from_snapshot(controller.snapshot()),
    )
    return response.model_dump()


@app.get("/state")
async def state() -> dict:
    return _state()


@app.post("/spin")
async def spin() -> dict:
    """
    POST /spin.

    Starts the reels and returns immediately; the spin resolves on its own
    timeline. Poll /state to follow it. Ignored while a spin is in flight.
    """
    controller.spin()
    return _state()


@app.post("/reset")
async def reset() -> dict:
    """Cancel any spin and restore the starting state."""
    controller.reset()
    return _state()


@app.post("/bet")
async def set_bet(body: BetRequest) -> dict:
    controller.set_bet(body.bet)
    return _state()


@app.post("/lines")
async def set_lines(body: LinesRequest) -> dict:
    controller.set_extra_lines(body.extraLines)
    return _state()
