"""Read-only engine inputs built from raw collaborator records."""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, Optional, Tuple

from .logger import get_logger

REMOTE = "remote"


def _positive_number(v: Any) -> Optional[float]:
    if isinstance(v, bool) or v is None:
        return None
    try:
        n = float(v)
    except (TypeError, ValueError):
        return None
    return n if n > 0 else None


def _number(v: Any) -> Optional[float]:
    if isinstance(v, bool) or v is None:
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def _str_tuple(values: Any) -> Tuple[str, ...]:
    if not values:
        return ()
    if isinstance(values, str):
        values = [values]
    return tuple(v for v in values if isinstance(v, str) and v.strip())


def _lower(v: Any) -> Optional[str]:
    return v.strip().lower() if isinstance(v, str) and v.strip() else None


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO date or datetime into an aware UTC datetime.

    Date-only values are read as midnight UTC. Returns None for anything
    that cannot be parsed.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    return as_utc(dt)


def as_utc(dt: datetime) -> datetime:
    """Naive datetimes are read as UTC; aware ones are converted."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass(frozen=True)
class Candidate:
    id: str
    skills: Tuple[str, ...] = ()
    experience_years: Optional[float] = None
    industry_experience: Tuple[str, ...] = ()
    expected_salary: Optional[float] = None
    max_commute_minutes: Optional[float] = None
    remote_preference: Optional[str] = None
    visa_required: bool = False
    availability_date: Optional[datetime] = None

    @property
    def prefers_remote(self) -> bool:
        return self.remote_preference == REMOTE

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Candidate":
        salary = _positive_number(record.get("expected_salary"))
        if salary is None:
            salary = _positive_number(record.get("salary_expectation_min"))

        raw_date = record.get("availability_date")
        availability = parse_datetime(raw_date)
        if raw_date and availability is None:
            get_logger().warning(
                "Unparsable availability date ignored",
                candidate_id=record.get("id"),
                availability_date=raw_date,
            )

        return cls(
            id=str(record.get("id")),
            skills=_str_tuple(record.get("skills")),
            experience_years=_number(record.get("experience_years")),
            industry_experience=_str_tuple(record.get("industry_experience")),
            expected_salary=salary,
            max_commute_minutes=_positive_number(record.get("max_commute_minutes")),
            remote_preference=_lower(record.get("remote_preference")) or _lower(record.get("work_model")),
            visa_required=bool(record.get("visa_required")),
            availability_date=availability,
        )


@dataclass(frozen=True)
class Job:
    id: str
    skills: Tuple[str, ...] = ()
    nice_to_have_skills: Tuple[str, ...] = ()
    must_have_skills: Tuple[str, ...] = ()
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    experience_min: float = 0
    experience_max: float = 20
    industry: Optional[str] = None
    remote_type: Optional[str] = None
    visa_sponsorship: bool = False

    @property
    def is_remote(self) -> bool:
        return self.remote_type == REMOTE

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Job":
        exp_min = _number(record.get("experience_min"))
        exp_max = _number(record.get("experience_max"))
        industry = record.get("industry")
        return cls(
            id=str(record.get("id")),
            skills=_str_tuple(record.get("skills")),
            nice_to_have_skills=_str_tuple(record.get("nice_to_have_skills")),
            must_have_skills=_str_tuple(record.get("must_have_skills")),
            salary_min=_positive_number(record.get("salary_min")),
            salary_max=_positive_number(record.get("salary_max")),
            experience_min=exp_min if exp_min else 0,
            experience_max=exp_max if exp_max else 20,
            industry=industry.strip() if isinstance(industry, str) and industry.strip() else None,
            remote_type=_lower(record.get("remote_type")),
            visa_sponsorship=bool(record.get("visa_sponsorship")),
        )


@dataclass(frozen=True)
class TaxonomyEntry:
    canonical_name: str
    transferability_from: Tuple[str, ...] = ()

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "TaxonomyEntry":
        sources = record.get("transferability_from") or ()
        if isinstance(sources, dict):
            # {"skill": weight} rows; only the keys are used
            sources = list(sources.keys())
        return cls(
            canonical_name=str(record.get("canonical_name") or ""),
            transferability_from=_str_tuple(sources),
        )


def taxonomy_from_records(records: Iterable[Dict[str, Any]]) -> Tuple[TaxonomyEntry, ...]:
    entries = (TaxonomyEntry.from_record(r) for r in records or ())
    return tuple(e for e in entries if e.canonical_name)
