"""
Score composition: weighted fit/constraint blend capped by the aggregate gate.

Caps only ever lower the weighted value.
"""

from .config import Weights
from .gates import Gate
from .normalize import clamp_score

GATE_CAPS = {
    Gate.FAIL: 35,
    Gate.WARN: 70,
}


def compose_overall(fit_score: int, constraint_score: int, weights: Weights, overall_gate: Gate) -> int:
    overall = clamp_score(fit_score * weights.fit + constraint_score * weights.constraints)
    cap = GATE_CAPS.get(overall_gate)
    if cap is not None:
        overall = min(overall, cap)
    return overall
