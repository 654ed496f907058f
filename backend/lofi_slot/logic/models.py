"""Game state models."""
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

Reel = tuple[str, ...]


class Payline(str, Enum):
    """Row read across all three reels."""
    TOP = "top"
    MID = "mid"
    BOT = "bot"

    @property
    def offset(self) -> int:
        """Row delta relative to the visible middle cell."""
        return PAYLINE_OFFSETS[self]

    @property
    def label(self) -> str:
        return PAYLINE_LABELS[self]


PAYLINE_OFFSETS = {Payline.TOP: -1, Payline.MID: 0, Payline.BOT: 1}
PAYLINE_LABELS = {Payline.TOP: "Top", Payline.MID: "Center", Payline.BOT: "Bottom"}


class SpinPhase(str, Enum):
    """Lifecycle phase of the spin state machine."""
    IDLE = "IDLE"
    SPINNING = "SPINNING"
    RESOLVING = "RESOLVING"


class ReelState(str, Enum):
    """Per-reel sub-state while a spin is in flight."""
    ROLLING = "ROLLING"
    SETTLED = "SETTLED"


class Win(BaseModel):
    """A qualifying payline match and its payout."""
    model_config = ConfigDict(frozen=True)

    line: Payline
    symbol: str
    match_count: int
    payout: int


class SpinSnapshot(BaseModel):
    """
    Immutable capture of one spin, used for evaluation.

    Reels, bet and line mode are fixed when the spin starts; positions are
    the final settled positions.
    """
    model_config = ConfigDict(frozen=True)

    round_id: str
    reels: tuple[Reel, ...]
    positions: tuple[int, ...]
    bet: int
    extra_lines: bool


class GameState(BaseModel):
    """
    Single live game session.

    Tracks:
    - credits / bet / extra_lines (written by the credit manager only)
    - phase / spinning / reel_states / positions / reels / wins
      (written by the spin state machine only)
    - status message
    """
    credits: int = 0
    bet: int = 1
    extra_lines: bool = False

    phase: SpinPhase = SpinPhase.IDLE
    spinning: bool = False
    reel_states: list[ReelState] = Field(
        default_factory=lambda: [ReelState.SETTLED] * 3
    )
    positions: list[int] = Field(default_factory=lambda: [0, 0, 0])
    reels: list[Reel] = Field(default_factory=list)

    wins: list[Win] = Field(default_factory=list)
    message: str = ""
    round_id: str | None = None


class GameSnapshot(BaseModel):
    """Read-only view of the game published after every transition."""
    model_config = ConfigDict(frozen=True)

    credits: int
    bet: int
    spin_cost: int
    bet_cap: int
    extra_lines: bool
    positions: tuple[int, ...]
    window: tuple[tuple[str, ...], ...]  # rows top/mid/bot, one symbol per reel
    spinning: bool
    phase: SpinPhase
    reel_states: tuple[ReelState, ...]
    wins: tuple[Win, ...] = ()
    total_win: int = 0
    message: str = ""
    round_id: str | None = None


class SpinStarted(BaseModel):
    """Notification: a spin was charged and its reels started rolling."""
    model_config = ConfigDict(frozen=True)

    round_id: str
    bet: int
    line_count: int
    cost: int
    credits_after: int


class SpinResolved(BaseModel):
    """Notification: a spin settled and its payout was credited."""
    model_config = ConfigDict(frozen=True)

    snapshot: SpinSnapshot
    wins: tuple[Win, ...]
    total_win: int
    credits_after: int


class SpinRejected(BaseModel):
    """Notification: a spin request did not start."""
    model_config = ConfigDict(frozen=True)

    reason: str
    cost: int
    credits: int
