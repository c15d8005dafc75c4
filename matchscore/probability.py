"""Deal probability estimate derived from the overall match and its signals."""

from .gates import Gate
from .normalize import clamp, round_half_up
from .result import ConstraintFactors, FitFactors

MIN_PROBABILITY = 5
MAX_PROBABILITY = 95

FAIL_FACTOR = 0.3
WARN_FACTOR = 0.7
STRONG_SKILLS_SCORE = 80
STRONG_SKILLS_FACTOR = 1.1
NEGOTIABLE_SALARY_FACTOR = 1.05
MISSING_SKILLS_LIMIT = 2
MISSING_SKILLS_FACTOR = 0.8


def estimate_deal_probability(
    overall_match: int,
    overall_gate: Gate,
    fit: FitFactors,
    constraints: ConstraintFactors,
) -> int:
    """
    Start from the overall match and apply multiplicative adjustments in
    a fixed order. The result never leaves [5, 95].
    """
    prob = float(overall_match)

    if overall_gate is Gate.FAIL:
        prob *= FAIL_FACTOR
    elif overall_gate is Gate.WARN:
        prob *= WARN_FACTOR

    if fit.skills.score >= STRONG_SKILLS_SCORE:
        prob *= STRONG_SKILLS_FACTOR

    if constraints.salary.negotiable:
        prob *= NEGOTIABLE_SALARY_FACTOR

    if len(fit.skills.missing) > MISSING_SKILLS_LIMIT:
        prob *= MISSING_SKILLS_FACTOR

    return int(clamp(round_half_up(prob), MIN_PROBABILITY, MAX_PROBABILITY))
