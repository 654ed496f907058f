"""Protocol models for the HTTP surface."""
from pydantic import BaseModel, Field

from lofi_slot.config import Settings, settings
from lofi_slot.config_hash import get_config_hash
from lofi_slot.logic.models import GameSnapshot
from lofi_slot.logic.paylines import PAYOUT_MULTIPLIERS


# === Request Models ===


class BetRequest(BaseModel):
    """POST /bet request body. Out-of-range bets are clamped, not rejected."""

    bet: int = Field(..., description="Requested bet per line")


class LinesRequest(BaseModel):
    """POST /lines request body."""

    extraLines: bool = Field(..., description="Enable top and bottom paylines")


# === Response Models ===


class Configuration(BaseModel):
    """Configuration object in /init response."""

    symbols: list[str]
    maxBet: int
    startingCredits: int
    tickMs: int
    settleMs: list[int]
    resolveGraceMs: int
    payouts: dict[str, int] = Field(
        default_factory=lambda: {str(k): v for k, v in sorted(PAYOUT_MULTIPLIERS.items())}
    )
    configHash: str

    @classmethod
    def from_settings(cls, config: Settings) -> "Configuration":
        return cls(
            symbols=list(config.symbols),
            maxBet=config.max_bet,
            startingCredits=config.starting_credits,
            tickMs=config.tick_ms,
            settleMs=list(config.settle_ms),
            resolveGraceMs=config.resolve_grace_ms,
            configHash=get_config_hash(config),
        )


class WinLine(BaseModel):
    """One winning payline."""

    line: str
    symbol: str
    matchCount: int
    payout: int


class StateResponse(BaseModel):
    """Observable game state, returned by every endpoint."""

    protocolVersion: str = settings.protocol_version
    credits: int
    bet: int
    spinCost: int
    betCap: int
    extraLines: bool
    positions: list[int]
    window: list[list[str]]
    spinning: bool
    phase: str
    reelStates: list[str]
    wins: list[WinLine] = Field(default_factory=list)
    totalWin: int = 0
    message: str = ""
    roundId: str | None = None

    @classmethod
    def from_snapshot(cls, snapshot: GameSnapshot) -> "StateResponse":
        return cls(
            credits=snapshot.credits,
            bet=snapshot.bet,
            spinCost=snapshot.spin_cost,
            betCap=snapshot.bet_cap,
            extraLines=snapshot.extra_lines,
            positions=list(snapshot.positions),
            window=[list(row) for row in snapshot.window],
            spinning=snapshot.spinning,
            phase=snapshot.phase.value,
            reelStates=[s.value for s in snapshot.reel_states],
            wins=[
                WinLine(
                    line=w.line.value,
                    symbol=w.symbol,
                    matchCount=w.match_count,
                    payout=w.payout,
                )
                for w in snapshot.wins
            ],
            totalWin=snapshot.total_win,
            message=snapshot.message,
            roundId=snapshot.round_id,
        )


class InitResponse(BaseModel):
    """GET /init response."""

    protocolVersion: str = settings.protocol_version
    configuration: Configuration
    state: StateResponse
