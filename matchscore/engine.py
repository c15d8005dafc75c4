"""
Match Engine Orchestrator.

Responsibilities:
- Run gates, fit, constraints, composition, deal probability and
  explanation in a fixed order.
- Fetch inputs and hand results to the outcome recorder (MatchService).

Non-Responsibilities:
- No scoring rules of its own.
- No storage details.

Invariant:
Given identical candidate, job, taxonomy, configuration and reference
time, compute_match returns an identical result.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from . import MATCH_VERSION
from .composer import compose_overall
from .config import ConfigProvider, MatchingConfig
from .constraints import score_constraints
from .explain import explain
from .fit import score_fit
from .gates import evaluate_gates
from .logger import StructuredLogger, get_logger
from .models import Candidate, Job, TaxonomyEntry, taxonomy_from_records
from .probability import estimate_deal_probability
from .result import MatchResult
from .retry import is_transient_error
from .schema import validate_match_request
from .sources import OutcomeRecorder, RecordSource
from .taxonomy import SkillTransferabilityIndex


def compute_match(
    candidate: Candidate,
    job: Job,
    taxonomy: Iterable[TaxonomyEntry] | SkillTransferabilityIndex,
    config: MatchingConfig,
    now: datetime,
) -> MatchResult:
    """Pure computation of one candidate-job match. A naive now is read as UTC."""
    index = taxonomy if isinstance(taxonomy, SkillTransferabilityIndex) else SkillTransferabilityIndex(taxonomy)
    weights = config.weights
    thresholds = config.gate_thresholds

    gates = evaluate_gates(candidate, job, thresholds, now)
    fit_score, fit_factors = score_fit(candidate, job, index, weights.fit_breakdown)
    constraint_score, constraint_factors = score_constraints(
        candidate, job, thresholds, weights.constraint_breakdown, now
    )
    overall = compose_overall(fit_score, constraint_score, weights, gates.overall)
    deal_probability = estimate_deal_probability(overall, gates.overall, fit_factors, constraint_factors)

    return MatchResult(
        version=MATCH_VERSION,
        gates=gates,
        fit_score=fit_score,
        fit_factors=fit_factors,
        constraint_score=constraint_score,
        constraint_factors=constraint_factors,
        overall_match=overall,
        deal_probability=deal_probability,
        explainability=explain(gates, fit_factors, constraint_factors),
    )


@dataclass(frozen=True)
class MatchRequest:
    candidate_id: str
    job_id: str
    submission_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchRequest":
        errors = validate_match_request(data)
        if errors:
            raise ValueError("Invalid match request: " + "; ".join(errors))
        return cls(
            candidate_id=data["candidateId"].strip(),
            job_id=data["jobId"].strip(),
            submission_id=(data.get("submissionId") or "").strip() or None,
        )


class MatchService:
    """
    Fetches inputs, computes the match and, when a submission id is
    given, persists it. Persistence failures are logged, never raised.
    """

    def __init__(
        self,
        source: RecordSource,
        recorder: Optional[OutcomeRecorder] = None,
        logger: Optional[StructuredLogger] = None,
        clock=None,
    ):
        self.source = source
        self.recorder = recorder
        self.logger = logger or get_logger()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def load_candidate(self, candidate_id: str) -> Candidate:
        return Candidate.from_record(self.source.get_candidate(candidate_id))

    def load_job_context(self, job_id: str):
        """Job, taxonomy index and active config: everything not candidate-specific."""
        job = Job.from_record(self.source.get_job(job_id))
        index = SkillTransferabilityIndex(taxonomy_from_records(self.source.get_taxonomy()))
        config = ConfigProvider(self.source).active()
        return job, index, config

    def run(self, request: MatchRequest, now: Optional[datetime] = None) -> MatchResult:
        candidate = self.load_candidate(request.candidate_id)
        job, index, config = self.load_job_context(request.job_id)
        return self.score(request, candidate, job, index, config, now)

    def score(
        self,
        request: MatchRequest,
        candidate: Candidate,
        job: Job,
        index: SkillTransferabilityIndex,
        config: MatchingConfig,
        now: Optional[datetime] = None,
    ) -> MatchResult:
        result = compute_match(candidate, job, index, config, now or self.clock())
        self.logger.record_match(result.gates.overall.value)
        self.logger.info(
            f"Match: candidate {request.candidate_id} + job {request.job_id} = "
            f"{result.overall_match}% (deal: {result.deal_probability}%)",
            overall_gate=result.gates.overall.value,
            submission_id=request.submission_id,
        )

        if request.submission_id:
            self.persist(request, result)
        return result

    def persist(self, request: MatchRequest, result: MatchResult) -> None:
        if self.recorder is None:
            self.logger.warning("No outcome recorder configured, result not persisted",
                                submission_id=request.submission_id)
            return

        # Independent writes: one failing does not skip the other
        try:
            self.recorder.record_prediction(
                request.submission_id, request.candidate_id, request.job_id, result
            )
            self.logger.record_persisted()
        except Exception as e:
            self._persist_failed("calibration log", request, e)

        try:
            self.recorder.attach_to_submission(request.submission_id, result)
        except Exception as e:
            self._persist_failed("submission record", request, e)

    def _persist_failed(self, target: str, request: MatchRequest, error: Exception) -> None:
        self.logger.record_persist_failure(type(error).__name__)
        self.logger.error(
            f"Failed to write {target}",
            submission_id=request.submission_id,
            error=str(error),
            transient=is_transient_error(error),
        )
