"""Game settings validators."""
from lofi_slot.config import Settings
from lofi_slot.errors import ErrorCode, GameError, InvalidBet

REEL_COUNT = 3
MIN_SYMBOLS = 3


def validate_symbols(config: Settings) -> None:
    """
    Validate the reel alphabet.

    Raises INVALID_CONFIG if there are too few symbols or duplicates.
    """
    if len(config.symbols) < MIN_SYMBOLS:
        raise GameError(
            ErrorCode.INVALID_CONFIG,
            f"At least {MIN_SYMBOLS} symbols required, got {len(config.symbols)}.",
        )
    if len(set(config.symbols)) != len(config.symbols):
        raise GameError(
            ErrorCode.INVALID_CONFIG,
            f"Symbols must be distinct: {config.symbols}",
        )


def validate_betting(config: Settings) -> None:
    """
    Validate bet and credit defaults.

    Raises INVALID_BET if max_bet is below 1, INVALID_CONFIG on negative credits.
    """
    if config.max_bet < 1:
        raise InvalidBet(f"max_bet must be at least 1, got {config.max_bet}.")
    if config.starting_credits < 0:
        raise GameError(
            ErrorCode.INVALID_CONFIG,
            f"starting_credits must not be negative, got {config.starting_credits}.",
        )


def validate_timeline(config: Settings) -> None:
    """
    Validate the spin timeline.

    Settle deadlines must be one per reel, positive and strictly increasing
    so that reels always settle left to right.
    """
    if config.tick_ms <= 0:
        raise GameError(
            ErrorCode.INVALID_CONFIG, f"tick_ms must be positive, got {config.tick_ms}."
        )
    if len(config.settle_ms) != REEL_COUNT:
        raise GameError(
            ErrorCode.INVALID_CONFIG,
            f"settle_ms needs {REEL_COUNT} deadlines, got {len(config.settle_ms)}.",
        )
    if config.settle_ms[0] <= 0 or any(
        a >= b for a, b in zip(config.settle_ms, config.settle_ms[1:])
    ):
        raise GameError(
            ErrorCode.INVALID_CONFIG,
            f"settle_ms must be positive and strictly increasing, got {config.settle_ms}.",
        )
    if config.resolve_grace_ms < 0:
        raise GameError(
            ErrorCode.INVALID_CONFIG,
            f"resolve_grace_ms must not be negative, got {config.resolve_grace_ms}.",
        )


def validate_game_settings(config: Settings) -> None:
    """Run all validations on game settings."""
    validate_symbols(config)
    validate_betting(config)
    validate_timeline(config)
