"""
Collaborator interfaces.

RecordSource supplies raw candidate, job, taxonomy and configuration
records; OutcomeRecorder writes results back. Implementations live in
repository.py (SQLAlchemy) and remote.py (HTTP).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class RecordNotFoundError(LookupError):
    """A requested candidate, job or submission does not exist."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind.capitalize()} not found: {record_id}")


class RecordSource(ABC):
    @abstractmethod
    def get_candidate(self, candidate_id: str) -> Dict[str, Any]:
        """Raw candidate record. Raises RecordNotFoundError."""

    @abstractmethod
    def get_job(self, job_id: str) -> Dict[str, Any]:
        """Raw job record. Raises RecordNotFoundError."""

    @abstractmethod
    def get_taxonomy(self) -> List[Dict[str, Any]]:
        """The full skill taxonomy table."""

    @abstractmethod
    def get_active_config(self) -> Optional[Dict[str, Any]]:
        """The single active matching configuration, or None."""

    @abstractmethod
    def list_submissions(self, job_id: str) -> List[Dict[str, Any]]:
        """Active submissions (id, candidate_id, job_id) on a job, for batch runs."""


class OutcomeRecorder(ABC):
    @abstractmethod
    def record_prediction(self, submission_id: str, candidate_id: str, job_id: str, result) -> None:
        """Upsert the calibration row keyed by submission id."""

    @abstractmethod
    def attach_to_submission(self, submission_id: str, result) -> None:
        """Store the result on the candidate-job relationship record."""
