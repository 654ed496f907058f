"""Config hash computation.

This module provides a shared config_hash function used by:
- audit_sim.py (CSV audit)
- telemetry.py (spin_resolved event)
- the /init response

The hash MUST be computed identically in all locations.
"""
import hashlib
import json

from lofi_slot.config import Settings, settings
from lofi_slot.logic.paylines import PAYOUT_MULTIPLIERS


def get_config_hash(config: Settings | None = None) -> str:
    """
    Generate hash of the game-affecting configuration.

    Returns 16-char hex hash of config snapshot, spin timeline included.
    """
    config = config or settings
    config_snapshot = {
        "symbols": list(config.symbols),
        "starting_credits": config.starting_credits,
        "max_bet": config.max_bet,
        "tick_ms": config.tick_ms,
        "settle_ms": list(config.settle_ms),
        "resolve_grace_ms": config.resolve_grace_ms,
        "payout_multipliers": {str(k): v for k, v in PAYOUT_MULTIPLIERS.items()},
    }
    canonical = json.dumps(config_snapshot, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode()).hexdigest()[:16]
