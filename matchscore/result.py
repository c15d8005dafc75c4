"""
Typed match result.

Every dataclass here is frozen; ``to_dict`` produces the camelCase JSON
shape consumed by the web client and stored on the submission record.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .gates import GateResults


def _number(v: float) -> Any:
    # 5.0 -> 5 so serialized output does not depend on float formatting
    return int(v) if float(v).is_integer() else v


@dataclass(frozen=True)
class SkillsFactor:
    score: int
    matched: Tuple[str, ...] = ()
    missing: Tuple[str, ...] = ()
    transferable: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "matched": list(self.matched),
            "missing": list(self.missing),
            "transferable": list(self.transferable),
        }


@dataclass(frozen=True)
class ExperienceFactor:
    score: int
    years: float
    level_match: bool
    gap: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "years": _number(self.years),
            "levelMatch": self.level_match,
            "gap": _number(self.gap),
        }


@dataclass(frozen=True)
class IndustryFactor:
    score: int
    industries: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "industries": list(self.industries)}


@dataclass(frozen=True)
class FitFactors:
    skills: SkillsFactor
    experience: ExperienceFactor
    industry: IndustryFactor

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skills": self.skills.to_dict(),
            "experience": self.experience.to_dict(),
            "industry": self.industry.to_dict(),
        }


@dataclass(frozen=True)
class SalaryFactor:
    score: int
    gap: float
    negotiable: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "gap": _number(round(self.gap, 1)), "negotiable": self.negotiable}


@dataclass(frozen=True)
class CommuteFactor:
    score: int
    minutes: float

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "minutes": _number(self.minutes)}


@dataclass(frozen=True)
class StartDateFactor:
    score: int
    days_until: int

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "daysUntil": self.days_until}


@dataclass(frozen=True)
class ConstraintFactors:
    salary: SalaryFactor
    commute: CommuteFactor
    start_date: StartDateFactor

    def to_dict(self) -> Dict[str, Any]:
        return {
            "salary": self.salary.to_dict(),
            "commute": self.commute.to_dict(),
            "startDate": self.start_date.to_dict(),
        }


@dataclass(frozen=True)
class Explainability:
    top_reasons: Tuple[str, ...]
    top_risks: Tuple[str, ...]
    next_action: str
    why_not: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "topReasons": list(self.top_reasons),
            "topRisks": list(self.top_risks),
            "nextAction": self.next_action,
        }
        if self.why_not is not None:
            data["whyNot"] = self.why_not
        return data


@dataclass(frozen=True)
class MatchResult:
    version: str
    gates: GateResults
    fit_score: int
    fit_factors: FitFactors
    constraint_score: int
    constraint_factors: ConstraintFactors
    overall_match: int
    deal_probability: int
    explainability: Explainability

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "gates": self.gates.to_dict(),
            "fitScore": self.fit_score,
            "fitFactors": self.fit_factors.to_dict(),
            "constraintScore": self.constraint_score,
            "constraintFactors": self.constraint_factors.to_dict(),
            "overallMatch": self.overall_match,
            "dealProbability": self.deal_probability,
            "explainability": self.explainability.to_dict(),
        }
