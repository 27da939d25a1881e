"""Config hash shared by telemetry and the audit script.

The hash covers the tuned game content (weights, paytable, multipliers)
and the bet menu, so audit CSVs and spin telemetry can be correlated
with the exact math that produced them.
"""
import hashlib
import json

from phaseslot.config import settings
from phaseslot.logic.grid import build_symbol_weights
from phaseslot.logic.paylines import PAYLINES, PAYOUT_THREE_WILDS, PAYTABLE
from phaseslot.logic.phase import LOOP_DURATION_MS, PHASE_MULTIPLIERS, PHASE_THRESHOLDS, Phase


def get_config_hash() -> str:
    """Return 16-char hex hash of the current math and bet configuration."""
    config_snapshot = {
        "loop_duration_ms": LOOP_DURATION_MS,
        "phase_thresholds": {p.value: v for p, v in PHASE_THRESHOLDS.items()},
        "phase_multipliers": {p.value: v for p, v in PHASE_MULTIPLIERS.items()},
        "weights": {
            phase.value: [[s.value, w] for s, w in build_symbol_weights(phase)]
            for phase in Phase
        },
        "paytable": {s.value: v for s, v in PAYTABLE.items()},
        "payout_three_wilds": PAYOUT_THREE_WILDS,
        "paylines": [[list(c) for c in line] for line in PAYLINES],
        "allowed_bets": list(settings.allowed_bets),
    }
    canonical = json.dumps(config_snapshot, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode()).hexdigest()[:16]
