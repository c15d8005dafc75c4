"""HTTP collaborators for a PostgREST-style marketplace API."""

from typing import Any, Dict, List, Optional

import requests

from .logger import get_logger
from .result import MatchResult
from .repository import prediction_row
from .retry import CircuitBreaker, exponential_backoff, should_retry_http_status
from .sources import OutcomeRecorder, RecordNotFoundError, RecordSource

REQUEST_TIMEOUT = 15


class TransientHTTPError(Exception):
    """A response status worth retrying (408, 429, 5xx)."""

    def __init__(self, status_code: int, url: str):
        self.status_code = status_code
        super().__init__(f"HTTP {status_code} from {url}")


def _log_retry(attempt: int, error: Exception, delay: float) -> None:
    logger = get_logger()
    logger.record_fetch_retry(type(error).__name__)
    logger.warning("Marketplace API call failed, retrying", attempt=attempt, delay=delay, error=str(error))


http_retry = exponential_backoff(
    max_retries=3,
    base_delay=1.0,
    exceptions=(requests.exceptions.Timeout, requests.exceptions.ConnectionError, TransientHTTPError),
    on_retry=_log_retry,
)


class RestClient:
    """Thin requests wrapper: auth headers, retry, circuit breaker."""

    def __init__(self, base_url: str, api_key: str, session: Optional[requests.Session] = None,
                 breaker: Optional[CircuitBreaker] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })
        self.breaker = breaker or CircuitBreaker(failure_threshold=5, recovery_timeout=60)

    def url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def request(self, method: str, table: str, **kwargs) -> requests.Response:
        return self.breaker.call(self._request_with_retry, method, table, **kwargs)

    @http_retry
    def _request_with_retry(self, method: str, table: str, **kwargs) -> requests.Response:
        url = self.url(table)
        resp = self.session.request(method, url, timeout=REQUEST_TIMEOUT, **kwargs)
        if should_retry_http_status(resp.status_code):
            raise TransientHTTPError(resp.status_code, url)
        resp.raise_for_status()
        return resp

    def select(self, table: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        resp = self.request("GET", table, params={"select": "*", **params})
        return resp.json() or []


class RestRecordSource(RecordSource):
    def __init__(self, client: RestClient):
        self.client = client

    def _get_one(self, table: str, kind: str, record_id: str) -> Dict[str, Any]:
        rows = self.client.select(table, {"id": f"eq.{record_id}", "limit": "1"})
        if not rows:
            raise RecordNotFoundError(kind, record_id)
        return rows[0]

    def get_candidate(self, candidate_id: str) -> Dict[str, Any]:
        return self._get_one("candidates", "candidate", candidate_id)

    def get_job(self, job_id: str) -> Dict[str, Any]:
        return self._get_one("jobs", "job", job_id)

    def get_taxonomy(self) -> List[Dict[str, Any]]:
        return self.client.select("skill_taxonomy", {"order": "id.asc"})

    def get_active_config(self) -> Optional[Dict[str, Any]]:
        rows = self.client.select("matching_config", {"active": "eq.true", "order": "id.desc", "limit": "1"})
        return rows[0] if rows else None

    def list_submissions(self, job_id: str) -> List[Dict[str, Any]]:
        return self.client.select("submissions", {"job_id": f"eq.{job_id}", "status": "eq.active", "order": "id.asc"})


class RestOutcomeRecorder(OutcomeRecorder):
    def __init__(self, client: RestClient):
        self.client = client

    def record_prediction(self, submission_id: str, candidate_id: str, job_id: str, result: MatchResult) -> None:
        self.client.request(
            "POST",
            "match_outcomes",
            params={"on_conflict": "submission_id"},
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            json=prediction_row(submission_id, candidate_id, job_id, result),
        )

    def attach_to_submission(self, submission_id: str, result: MatchResult) -> None:
        self.client.request(
            "PATCH",
            "submissions",
            params={"id": f"eq.{submission_id}"},
            headers={"Prefer": "return=minimal"},
            json={"match_score": result.overall_match, "match_score_v3": result.to_dict()},
        )
