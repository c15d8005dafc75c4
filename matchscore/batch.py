"""
Batch recomputation of every active submission on a job.

Pairs are independent, so they run on a thread pool with no
coordination; cancellation is checked before each pair starts.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .engine import MatchRequest, MatchService
from .result import MatchResult
from .sources import RecordNotFoundError


@dataclass
class BatchReport:
    job_id: str
    results: Dict[str, MatchResult] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)
    cancelled: List[str] = field(default_factory=list)
    duration_s: float = 0.0

    def summary(self) -> dict:
        return {
            "jobId": self.job_id,
            "computed": len(self.results),
            "failed": len(self.errors),
            "cancelled": len(self.cancelled),
            "durationSeconds": round(self.duration_s, 3),
        }


class BatchScorer:
    def __init__(self, service: MatchService, max_workers: int = 4):
        self.service = service
        self.max_workers = max_workers
        self.cancel_event = threading.Event()

    def cancel(self) -> None:
        self.cancel_event.set()

    def run_for_job(self, job_id: str, now: Optional[datetime] = None) -> BatchReport:
        """Recompute and persist every active submission on ``job_id``.

        A failing pair is recorded in the report and never stops the batch.

        Raises:
            RecordNotFoundError: If the job does not exist
        """
        start = time.time()
        report = BatchReport(job_id=job_id)
        service = self.service
        logger = service.logger
        lock = threading.Lock()

        # Shared by every pair in the batch
        job, index, config = service.load_job_context(job_id)
        now = now or service.clock()
        submissions = service.source.list_submissions(job_id)
        logger.info(f"Batch start: {len(submissions)} submissions", job_id=job_id, workers=self.max_workers)

        def score_one(sub: dict) -> None:
            sub_id = sub["id"]
            if self.cancel_event.is_set():
                with lock:
                    report.cancelled.append(sub_id)
                return

            request = MatchRequest(candidate_id=sub["candidate_id"], job_id=job_id, submission_id=sub_id)
            try:
                candidate = service.load_candidate(request.candidate_id)
                result = service.score(request, candidate, job, index, config, now)
            except RecordNotFoundError as e:
                with lock:
                    report.errors[sub_id] = str(e)
                logger.warning("Batch pair skipped", submission_id=sub_id, error=str(e))
                return
            except Exception as e:
                with lock:
                    report.errors[sub_id] = f"{type(e).__name__}: {e}"
                logger.error("Batch pair failed", submission_id=sub_id, error=str(e))
                return

            with lock:
                report.results[sub_id] = result

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            list(executor.map(score_one, submissions))

        report.cancelled.sort()
        report.duration_s = time.time() - start
        logger.info("Batch done", **report.summary())
        return report
