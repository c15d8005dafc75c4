"""
SQL-backed collaborators.

Responsibilities:
- Read candidate, job, taxonomy and active configuration records.
- Upsert calibration rows keyed by submission id.
- Attach results to submission records and record actual outcomes.
- Import fixture records.

Non-Responsibilities:
- No scoring.

Invariant:
At most one calibration row per submission; rewriting a prediction
never touches the outcome columns.
"""

import math
from contextlib import closing
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import OperationalError

from . import MATCH_VERSION
from .database import (
    CandidateRecord,
    JobRecord,
    MatchingConfigRecord,
    MatchOutcome,
    SkillTaxonomyRecord,
    SubmissionRecord,
    get_session,
    row_to_dict,
)
from .logger import get_logger
from .models import parse_datetime
from .result import MatchResult
from .retry import exponential_backoff
from .sources import OutcomeRecorder, RecordNotFoundError, RecordSource


def _log_retry(attempt: int, error: Exception, delay: float) -> None:
    logger = get_logger()
    logger.record_fetch_retry(type(error).__name__)
    logger.warning("Database busy, retrying", attempt=attempt, delay=delay, error=str(error))


# A locked SQLite file surfaces as OperationalError
db_retry = exponential_backoff(
    max_retries=3, base_delay=0.2, max_delay=2.0, exceptions=(OperationalError,), on_retry=_log_retry
)


class SqlRecordSource(RecordSource):
    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    @db_retry
    def _get(self, model, kind: str, record_id: str) -> Dict[str, Any]:
        with closing(get_session(self.db_path)) as session:
            row = session.get(model, record_id)
            if row is None:
                raise RecordNotFoundError(kind, record_id)
            return row_to_dict(row)

    def get_candidate(self, candidate_id: str) -> Dict[str, Any]:
        return self._get(CandidateRecord, "candidate", candidate_id)

    def get_job(self, job_id: str) -> Dict[str, Any]:
        return self._get(JobRecord, "job", job_id)

    @db_retry
    def get_taxonomy(self) -> List[Dict[str, Any]]:
        with closing(get_session(self.db_path)) as session:
            rows = session.query(SkillTaxonomyRecord).order_by(SkillTaxonomyRecord.id).all()
            return [row_to_dict(r) for r in rows]

    @db_retry
    def get_active_config(self) -> Optional[Dict[str, Any]]:
        with closing(get_session(self.db_path)) as session:
            row = (
                session.query(MatchingConfigRecord)
                .filter_by(active=True)
                .order_by(MatchingConfigRecord.id.desc())
                .first()
            )
            if row is None:
                return None
            return {"weights": row.weights or {}, "gate_thresholds": row.gate_thresholds or {}}

    @db_retry
    def list_submissions(self, job_id: str) -> List[Dict[str, Any]]:
        with closing(get_session(self.db_path)) as session:
            rows = (
                session.query(SubmissionRecord)
                .filter_by(job_id=job_id, status="active")
                .order_by(SubmissionRecord.id)
                .all()
            )
            return [{"id": r.id, "candidate_id": r.candidate_id, "job_id": r.job_id} for r in rows]


def prediction_row(submission_id: str, candidate_id: str, job_id: str, result: MatchResult) -> Dict[str, Any]:
    return {
        "submission_id": submission_id,
        "candidate_id": candidate_id,
        "job_id": job_id,
        "match_version": result.version,
        "predicted_fit_score": result.fit_score,
        "predicted_constraint_score": result.constraint_score,
        "predicted_overall_score": result.overall_match,
        "predicted_deal_probability": result.deal_probability,
        "gate_results": result.gates.to_dict(),
    }


class SqlOutcomeRecorder(OutcomeRecorder):
    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    @db_retry
    def record_prediction(self, submission_id: str, candidate_id: str, job_id: str, result: MatchResult) -> None:
        row = prediction_row(submission_id, candidate_id, job_id, result)
        now = datetime.now()
        stmt = insert(MatchOutcome).values(**row, created_at=now, updated_at=now)
        update_cols = {k: stmt.excluded[k] for k in row if k != "submission_id"}
        update_cols["updated_at"] = now
        stmt = stmt.on_conflict_do_update(index_elements=["submission_id"], set_=update_cols)

        with closing(get_session(self.db_path)) as session:
            session.execute(stmt)
            session.commit()

    @db_retry
    def attach_to_submission(self, submission_id: str, result: MatchResult) -> None:
        with closing(get_session(self.db_path)) as session:
            submission = session.get(SubmissionRecord, submission_id)
            if submission is None:
                raise RecordNotFoundError("submission", submission_id)
            submission.match_score = result.overall_match
            submission.match_result = result.to_dict()
            session.commit()


def record_outcome(
    db_path: Path,
    submission_id: str,
    outcome: str,
    stage: Optional[str] = None,
    rejection_reason: Optional[str] = None,
    rejection_category: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Fill the actual-outcome columns of a submission's calibration row.

    When no prediction was ever stored, a row without predictions is
    created from the submission record.

    Raises:
        RecordNotFoundError: If neither a calibration row nor a submission exists
    """
    now = now or datetime.now()
    with closing(get_session(db_path)) as session:
        row = session.get(MatchOutcome, submission_id)
        days_to_outcome = None
        if row is None:
            submission = session.get(SubmissionRecord, submission_id)
            if submission is None:
                raise RecordNotFoundError("submission", submission_id)
            row = MatchOutcome(
                submission_id=submission_id,
                candidate_id=submission.candidate_id,
                job_id=submission.job_id,
                match_version=MATCH_VERSION,
                created_at=now,
            )
            session.add(row)
        else:
            days_to_outcome = math.ceil((now - row.created_at).total_seconds() / 86400)

        row.actual_outcome = outcome
        row.outcome_stage = stage
        row.rejection_reason = rejection_reason
        row.rejection_category = rejection_category
        row.days_to_outcome = days_to_outcome
        row.outcome_recorded_at = now
        session.commit()

        get_logger().info(
            f"Recorded outcome: {outcome} for submission {submission_id}",
            stage=stage,
            days_to_outcome=days_to_outcome,
        )
        return row_to_dict(row)


def list_outcomes(db_path: Path, job_id: Optional[str] = None) -> List[Dict[str, Any]]:
    with closing(get_session(db_path)) as session:
        query = session.query(MatchOutcome)
        if job_id:
            query = query.filter_by(job_id=job_id)
        return [row_to_dict(r) for r in query.order_by(MatchOutcome.submission_id).all()]


_IMPORT_TABLES = [
    ("candidates", CandidateRecord),
    ("jobs", JobRecord),
    ("skill_taxonomy", SkillTaxonomyRecord),
    ("matching_config", MatchingConfigRecord),
    ("submissions", SubmissionRecord),
]


def _coerce_row(model, record: Dict[str, Any]) -> Dict[str, Any]:
    columns = {c.name for c in model.__table__.columns}
    row = {k: v for k, v in record.items() if k in columns}
    if model is CandidateRecord and isinstance(row.get("availability_date"), str):
        parsed = parse_datetime(row["availability_date"])
        # SQLite stores naive datetimes; they are read back as UTC
        row["availability_date"] = parsed.replace(tzinfo=None) if parsed else None
    return row


def import_records(db_path: Path, data: Dict[str, List[Dict[str, Any]]]) -> Dict[str, int]:
    """
    Insert or replace records from a fixture mapping of table name -> rows.

    Returns:
        Number of rows written per table
    """
    counts: Dict[str, int] = {}
    with closing(get_session(db_path)) as session:
        for table, model in _IMPORT_TABLES:
            rows = data.get(table) or []
            for record in rows:
                session.merge(model(**_coerce_row(model, record)))
            counts[table] = len(rows)
        session.commit()
    return counts
