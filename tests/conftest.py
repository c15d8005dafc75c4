"""
Pytest configuration and shared fixtures.
"""

import pytest
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any

from matchscore.database import init_database
from matchscore.logger import get_logger, reset_logger
from matchscore.repository import import_records

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def quiet_logger(tmp_path):
    """Fresh global logger per test, writing only to a temp directory."""
    reset_logger()
    logger = get_logger(log_dir=tmp_path / "logs", enable_console=False)
    yield logger
    reset_logger()


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for availability calculations."""
    return NOW


@pytest.fixture
def candidate_record() -> Dict[str, Any]:
    """Candidate who clears every gate for job_record."""
    return {
        "id": "cand-1",
        "skills": ["Azure", "Intune", "PowerShell"],
        "experience_years": 5,
        "industry_experience": ["IT Services"],
        "expected_salary": 65000,
        "max_commute_minutes": 45,
        "remote_preference": "hybrid",
        "visa_required": False,
        "availability_date": "2025-01-25",
    }


@pytest.fixture
def job_record() -> Dict[str, Any]:
    """Hybrid endpoint engineering role."""
    return {
        "id": "job-1",
        "title": "endpoint engineer",
        "skills": ["Azure", "SCCM", "PowerShell"],
        "salary_min": 55000,
        "salary_max": 70000,
        "experience_min": 3,
        "experience_max": 8,
        "industry": "IT Services",
        "remote_type": "hybrid",
        "visa_sponsorship": False,
    }


@pytest.fixture
def taxonomy_records():
    """SCCM requirements can be partly covered by Intune experience."""
    return [
        {"id": 1, "canonical_name": "SCCM", "transferability_from": {"intune": 0.8}},
        {"id": 2, "canonical_name": "Kubernetes", "transferability_from": ["docker"]},
    ]


@pytest.fixture
def fixture_data(candidate_record, job_record, taxonomy_records) -> Dict[str, Any]:
    """Rows for import_records: one strong candidate, one weak, two submissions."""
    weak = {
        "id": "cand-2",
        "skills": ["Excel"],
        "experience_years": 1,
        "expected_salary": 99000,
        "availability_date": "2025-08-01",
    }
    return {
        "candidates": [candidate_record, weak],
        "jobs": [job_record],
        "skill_taxonomy": taxonomy_records,
        "submissions": [
            {"id": "sub-1", "candidate_id": "cand-1", "job_id": "job-1"},
            {"id": "sub-2", "candidate_id": "cand-2", "job_id": "job-1"},
            {"id": "sub-3", "candidate_id": "cand-1", "job_id": "job-1", "status": "withdrawn"},
        ],
    }


@pytest.fixture
def seeded_db(tmp_path, fixture_data) -> Path:
    """SQLite database with the fixture rows imported."""
    db_path = tmp_path / "matchscore.db"
    init_database(db_path)
    import_records(db_path, fixture_data)
    return db_path
