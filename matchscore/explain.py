"""
Explainability Generation.

Responsibilities:
- Turn already-computed gates and factors into short reason/risk lists
  and a recommended next action.

Non-Responsibilities:
- No scoring; nothing here re-derives a number.

Invariant:
At most three reasons and two risks, always in priority order.
"""

from typing import List, Optional

from .gates import Gate, GateResults
from .normalize import round_half_up
from .result import ConstraintFactors, Explainability, FitFactors

MAX_REASONS = 3
MAX_RISKS = 2
SALARY_IN_BUDGET_SCORE = 80
SHORT_NOTICE_DAYS = 30

ACTION_INTERVIEW = "Invite candidate to interview"
ACTION_CLARIFY = "Contact candidate for clarification"
ACTION_REVIEW = "Review profile"

# Checked in order; the first failing gate decides the action
FAIL_ACTIONS = [
    ("salary", "Clarify salary flexibility", "Salary expectation well above budget"),
    ("work_auth", "Clarify visa sponsorship", "Visa required but not offered"),
    ("availability", "Discuss start date", "Availability too late"),
]


def _format_years(years: float) -> str:
    return str(int(years)) if float(years).is_integer() else f"{years:g}"


def top_reasons(fit: FitFactors, constraints: ConstraintFactors) -> List[str]:
    reasons = []
    matched = fit.skills.matched
    if matched:
        reasons.append(f"{len(matched)} skill matches: {', '.join(matched[:3])}")
    if fit.experience.level_match:
        reasons.append(f"Experience fits: {_format_years(fit.experience.years)} years")
    if constraints.salary.score >= SALARY_IN_BUDGET_SCORE:
        reasons.append("Salary expectation within budget")
    if constraints.start_date.days_until <= SHORT_NOTICE_DAYS:
        reasons.append("Available at short notice")
    return reasons[:MAX_REASONS]


def top_risks(gates: GateResults, fit: FitFactors, constraints: ConstraintFactors) -> List[str]:
    risks = []
    missing = fit.skills.missing
    if missing:
        risks.append(f"Missing: {', '.join(missing[:2])}")
    if gates.salary in (Gate.WARN, Gate.FAIL):
        risks.append(f"Salary {round_half_up(constraints.salary.gap)}% over budget")
    if gates.availability is Gate.WARN:
        risks.append(f"Available only in {constraints.start_date.days_until} days")
    if gates.commute is Gate.WARN:
        risks.append("Check commute distance")
    return risks[:MAX_RISKS]


def next_action(gates: GateResults) -> tuple[str, Optional[str]]:
    if gates.overall is Gate.FAIL:
        for attr, action, why_not in FAIL_ACTIONS:
            if getattr(gates, attr) is Gate.FAIL:
                return action, why_not
        return ACTION_REVIEW, None
    if gates.overall is Gate.WARN:
        return ACTION_CLARIFY, None
    return ACTION_INTERVIEW, None


def explain(gates: GateResults, fit: FitFactors, constraints: ConstraintFactors) -> Explainability:
    action, why_not = next_action(gates)
    return Explainability(
        top_reasons=tuple(top_reasons(fit, constraints)),
        top_risks=tuple(top_risks(gates, fit, constraints)),
        next_action=action,
        why_not=why_not,
    )
