"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for input records, the submission
(candidate-job relationship) table and the calibration log.
"""

import functools
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    String,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class CandidateRecord(Base):
    """Candidate profile as stored by the marketplace."""

    __tablename__ = "candidates"

    id = Column(String, primary_key=True)
    skills = Column(JSON, nullable=False, default=list)
    experience_years = Column(Float)
    industry_experience = Column(JSON, nullable=False, default=list)
    expected_salary = Column(Float)
    salary_expectation_min = Column(Float)
    salary_expectation_max = Column(Float)
    max_commute_minutes = Column(Float)
    remote_preference = Column(String)  # remote, hybrid, onsite
    work_model = Column(String)
    visa_required = Column(Boolean, nullable=False, default=False)
    availability_date = Column(DateTime)


class JobRecord(Base):
    """Job posting."""

    __tablename__ = "jobs"

    id = Column(String, primary_key=True)
    title = Column(String)
    skills = Column(JSON, nullable=False, default=list)
    nice_to_have_skills = Column(JSON, nullable=False, default=list)
    must_have_skills = Column(JSON, nullable=False, default=list)
    salary_min = Column(Float)
    salary_max = Column(Float)
    experience_min = Column(Float)
    experience_max = Column(Float)
    industry = Column(String)
    remote_type = Column(String)  # remote, hybrid, onsite
    visa_sponsorship = Column(Boolean, nullable=False, default=False)


class SkillTaxonomyRecord(Base):
    __tablename__ = "skill_taxonomy"

    id = Column(Integer, primary_key=True, autoincrement=True)
    canonical_name = Column(String, nullable=False, unique=True)
    transferability_from = Column(JSON)  # {"intune": 0.8} or ["intune"]


class MatchingConfigRecord(Base):
    __tablename__ = "matching_config"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, default="default")
    active = Column(Boolean, nullable=False, default=False)
    weights = Column(JSON)
    gate_thresholds = Column(JSON)
    created_at = Column(DateTime, nullable=False, default=datetime.now)


class SubmissionRecord(Base):
    """A candidate submitted to a job; the match result is attached here."""

    __tablename__ = "submissions"

    id = Column(String, primary_key=True)
    candidate_id = Column(String, nullable=False, index=True)
    job_id = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, default="active")
    match_score = Column(Integer)
    match_result = Column(JSON)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)


class MatchOutcome(Base):
    """Calibration log: one prediction (and later its outcome) per submission."""

    __tablename__ = "match_outcomes"

    submission_id = Column(String, primary_key=True)
    candidate_id = Column(String, nullable=False)
    job_id = Column(String, nullable=False, index=True)
    match_version = Column(String, nullable=False)
    predicted_fit_score = Column(Integer)
    predicted_constraint_score = Column(Integer)
    predicted_overall_score = Column(Integer)
    predicted_deal_probability = Column(Integer)
    gate_results = Column(JSON)
    actual_outcome = Column(String)  # hired, rejected, withdrew, expired
    outcome_stage = Column(String)
    rejection_reason = Column(String)
    rejection_category = Column(String)
    days_to_outcome = Column(Integer)
    outcome_recorded_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)


def row_to_dict(row) -> Dict[str, Any]:
    """Plain column -> value mapping of an ORM row."""
    return {c.name: getattr(row, c.name) for c in row.__table__.columns}


@functools.lru_cache(maxsize=None)
def _engine(db_url: str):
    return create_engine(db_url)


def get_engine(db_path: Path):
    return _engine(f"sqlite:///{Path(db_path)}")


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(get_engine(db_path))


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    Session = sessionmaker(bind=get_engine(db_path))
    return Session()
