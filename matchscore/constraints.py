"""
Constraint Scoring.

Responsibilities:
- Score practical compatibility: salary, commute, start date.
- Combine the three sub-scores with the configured constraint weights.

Non-Responsibilities:
- No gate decisions (the gate evaluator reads the same inputs).

Invariant:
Unknown salary, commute or availability scores full credit.
"""

from datetime import datetime

from .config import ConstraintWeights, GateThresholds
from .gates import days_until, salary_gap_percent
from .models import Candidate, Job
from .normalize import clamp_score
from .result import CommuteFactor, ConstraintFactors, SalaryFactor, StartDateFactor

NEGOTIABLE_GAP_PERCENT = 20
SALARY_GAP_PENALTY = 2

# Assumed tolerance when the candidate gave none
DEFAULT_COMMUTE_MINUTES = 30
COMMUTE_FAIL_SCORE = 40
COMMUTE_WARN_SCORE = 70

IMMEDIATE_START_DAYS = 14
START_FAIL_SCORE = 30
START_WARN_SCORE = 60
START_DECAY_PER_DAY = 0.5


def score_salary(candidate: Candidate, job: Job) -> SalaryFactor:
    gap = salary_gap_percent(candidate, job)
    if gap is None or gap <= 0:
        return SalaryFactor(score=100, gap=0, negotiable=False)
    return SalaryFactor(
        score=clamp_score(100 - gap * SALARY_GAP_PENALTY),
        gap=gap,
        negotiable=gap <= NEGOTIABLE_GAP_PERCENT,
    )


def score_commute(candidate: Candidate, job: Job, t: GateThresholds) -> CommuteFactor:
    if job.is_remote or candidate.prefers_remote:
        return CommuteFactor(score=100, minutes=0)

    # The tolerance stands in for a measured commute
    minutes = candidate.max_commute_minutes or DEFAULT_COMMUTE_MINUTES
    if minutes > t.commute_fail_minutes:
        score = COMMUTE_FAIL_SCORE
    elif minutes > t.commute_warn_minutes:
        score = COMMUTE_WARN_SCORE
    else:
        score = 100
    return CommuteFactor(score=score, minutes=minutes)


def score_start_date(candidate: Candidate, t: GateThresholds, now: datetime) -> StartDateFactor:
    days = days_until(candidate.availability_date, now)
    if days is None:
        return StartDateFactor(score=100, days_until=0)

    if days > t.availability_fail_days:
        score = START_FAIL_SCORE
    elif days > t.availability_warn_days:
        score = START_WARN_SCORE
    elif days <= IMMEDIATE_START_DAYS:
        score = 100
    else:
        score = clamp_score(max(START_WARN_SCORE, 100 - START_DECAY_PER_DAY * days))
    return StartDateFactor(score=score, days_until=days)


def score_constraints(
    candidate: Candidate,
    job: Job,
    thresholds: GateThresholds,
    weights: ConstraintWeights,
    now: datetime,
) -> tuple[int, ConstraintFactors]:
    """Return the combined constraint score and its sub-factor breakdown."""
    factors = ConstraintFactors(
        salary=score_salary(candidate, job),
        commute=score_commute(candidate, job, thresholds),
        start_date=score_start_date(candidate, thresholds, now),
    )
    combined = (
        factors.salary.score * weights.salary
        + factors.commute.score * weights.commute
        + factors.start_date.score * weights.start_date
    )
    return clamp_score(combined), factors
