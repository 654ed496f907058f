"""Application configuration with game defaults, overridable from environment."""
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


DEFAULT_SYMBOLS = [
    "🍒", "🍋", "🔔", "⭐", "🍀", "7️⃣", "🍇", "💎", "🍉", "🥥", "🍓", "👑",
]


class Settings(BaseSettings):
    """Game and server settings."""

    model_config = ConfigDict(env_prefix="SLOT_")

    # Server
    debug: bool = False
    log_level: str = "INFO"

    # Protocol
    protocol_version: str = "1.0"

    # Reel alphabet, every reel is a permutation of it
    symbols: list[str] = DEFAULT_SYMBOLS

    # Credits and betting
    starting_credits: int = 100
    max_bet: int = 10
    initial_message: str = "Press SPIN to play."

    # Spin timeline (milliseconds from spin start)
    tick_ms: int = 70
    settle_ms: list[int] = [900, 1250, 1600]
    resolve_grace_ms: int = 80


settings = Settings()
