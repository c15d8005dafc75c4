"""
Gate Evaluation.

Responsibilities:
- Compute four independent pass/warn/fail eligibility gates
  (salary, commute, work authorization, availability).
- Derive the aggregate gate.

Non-Responsibilities:
- No weighted scoring.
- No score capping.

Invariant:
Missing data must never push a gate to fail.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from .config import GateThresholds
from .models import Candidate, Job, as_utc

# Assumed tolerance when the candidate gave none
DEFAULT_GATE_COMMUTE_MINUTES = 45
# Tolerances this short read as "lives very close"
SHORT_COMMUTE_MINUTES = 20

SECONDS_PER_DAY = 24 * 60 * 60


class Gate(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


@dataclass(frozen=True)
class GateResults:
    salary: Gate
    commute: Gate
    work_auth: Gate
    availability: Gate
    overall: Gate

    def to_dict(self) -> dict:
        return {
            "salary": self.salary.value,
            "commute": self.commute.value,
            "workAuth": self.work_auth.value,
            "availability": self.availability.value,
            "overallGate": self.overall.value,
        }


def salary_gap_percent(candidate: Candidate, job: Job) -> Optional[float]:
    """Percent by which the expectation exceeds the job ceiling (negative when under).

    None when either figure is unknown.
    """
    if not candidate.expected_salary or not job.salary_max:
        return None
    return (candidate.expected_salary - job.salary_max) / job.salary_max * 100


def days_until(when: Optional[datetime], now: datetime) -> Optional[int]:
    if when is None:
        return None
    return math.ceil((as_utc(when) - as_utc(now)).total_seconds() / SECONDS_PER_DAY)


def salary_gate(candidate: Candidate, job: Job, t: GateThresholds) -> Gate:
    gap = salary_gap_percent(candidate, job)
    if gap is None:
        return Gate.PASS
    if gap > t.salary_fail_percent:
        return Gate.FAIL
    if gap > t.salary_warn_percent:
        return Gate.WARN
    return Gate.PASS


def commute_gate(candidate: Candidate, job: Job, t: GateThresholds) -> Gate:
    if job.is_remote or candidate.prefers_remote:
        return Gate.PASS

    tolerance = candidate.max_commute_minutes or DEFAULT_GATE_COMMUTE_MINUTES
    gate = Gate.PASS
    if tolerance < t.commute_warn_minutes:
        gate = Gate.WARN
    # Overrides the warn above; kept as observed in production
    if tolerance < SHORT_COMMUTE_MINUTES:
        gate = Gate.PASS
    return gate


def work_auth_gate(candidate: Candidate, job: Job) -> Gate:
    if candidate.visa_required and not job.visa_sponsorship:
        return Gate.FAIL
    return Gate.PASS


def availability_gate(candidate: Candidate, t: GateThresholds, now: datetime) -> Gate:
    days = days_until(candidate.availability_date, now)
    if days is None:
        return Gate.PASS
    if days > t.availability_fail_days:
        return Gate.FAIL
    if days > t.availability_warn_days:
        return Gate.WARN
    return Gate.PASS


def aggregate_gate(salary: Gate, commute: Gate, work_auth: Gate, availability: Gate) -> Gate:
    # Commute is not a failing gate
    if Gate.FAIL in (salary, work_auth, availability):
        return Gate.FAIL
    if Gate.WARN in (salary, commute, availability):
        return Gate.WARN
    return Gate.PASS


def evaluate_gates(
    candidate: Candidate, job: Job, thresholds: GateThresholds, now: datetime
) -> GateResults:
    salary = salary_gate(candidate, job, thresholds)
    commute = commute_gate(candidate, job, thresholds)
    work_auth = work_auth_gate(candidate, job)
    availability = availability_gate(candidate, thresholds, now)
    return GateResults(
        salary=salary,
        commute=commute,
        work_auth=work_auth,
        availability=availability,
        overall=aggregate_gate(salary, commute, work_auth, availability),
    )
