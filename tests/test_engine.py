"""
Tests for engine.py - end-to-end match computation on plain records.
"""

import pytest
from datetime import datetime, timedelta, timezone

from matchscore import MATCH_VERSION
from matchscore.config import DEFAULT_CONFIG, config_from_dict
from matchscore.engine import MatchRequest, compute_match
from matchscore.gates import Gate
from matchscore.models import Candidate, Job, taxonomy_from_records, parse_datetime


@pytest.fixture
def taxonomy(taxonomy_records):
    return taxonomy_from_records(taxonomy_records)


def match(candidate_record, job_record, taxonomy, now, config=DEFAULT_CONFIG):
    return compute_match(
        Candidate.from_record(candidate_record),
        Job.from_record(job_record),
        taxonomy,
        config,
        now,
    )


class TestRecordParsing:

    def test_candidate_fallbacks(self):
        candidate = Candidate.from_record({
            "id": "c",
            "expected_salary": 0,
            "salary_expectation_min": 60000,
            "work_model": "Remote",
            "skills": ["Azure", "", None],
        })
        assert candidate.expected_salary == 60000
        assert candidate.prefers_remote
        assert candidate.skills == ("Azure",)

    def test_zero_commute_is_unknown(self):
        assert Candidate.from_record({"id": "c", "max_commute_minutes": 0}).max_commute_minutes is None

    def test_unparsable_date_is_ignored(self, quiet_logger, tmp_path):
        candidate = Candidate.from_record({"id": "c", "availability_date": "next spring"})
        assert candidate.availability_date is None

        log_text = "".join(p.read_text() for p in (tmp_path / "logs").glob("*.log"))
        assert "Unparsable availability date ignored" in log_text

    def test_parse_datetime(self):
        assert parse_datetime("2025-01-25") == datetime(2025, 1, 25, tzinfo=timezone.utc)
        assert parse_datetime("2025-01-25T10:00:00Z") == datetime(2025, 1, 25, 10, tzinfo=timezone.utc)
        assert parse_datetime(datetime(2025, 1, 25)) == datetime(2025, 1, 25, tzinfo=timezone.utc)
        assert parse_datetime("") is None
        assert parse_datetime(12) is None

    def test_job_defaults(self):
        job = Job.from_record({"id": "j", "experience_max": None, "industry": "  "})
        assert job.experience_min == 0
        assert job.experience_max == 20
        assert job.industry is None


class TestComputeMatch:

    def test_strong_match(self, candidate_record, job_record, taxonomy, now):
        result = match(candidate_record, job_record, taxonomy, now)

        assert result.version == MATCH_VERSION
        assert result.gates.overall is Gate.PASS
        assert result.fit_factors.skills.matched == ("azure", "powershell")
        assert result.fit_factors.skills.transferable == ("sccm",)
        assert result.fit_score == 95
        assert result.constraint_score == 100
        assert result.overall_match == 97
        assert result.deal_probability == 95
        assert result.explainability.next_action == "Invite candidate to interview"
        assert result.explainability.top_reasons == (
            "2 skill matches: azure, powershell",
            "Experience fits: 5 years",
            "Salary expectation within budget",
        )

    def test_salary_at_ceiling(self, candidate_record, job_record, taxonomy, now):
        candidate_record["expected_salary"] = 70000
        result = match(candidate_record, job_record, taxonomy, now)

        assert result.gates.salary is Gate.PASS
        assert result.constraint_factors.salary.score == 100

    def test_salary_fail_caps_overall(self, candidate_record, job_record, taxonomy, now):
        candidate_record["expected_salary"] = 95000
        result = match(candidate_record, job_record, taxonomy, now)

        assert result.gates.salary is Gate.FAIL
        assert result.gates.overall is Gate.FAIL
        assert result.overall_match <= 35
        assert result.explainability.why_not == "Salary expectation well above budget"

    def test_salary_risk_uses_unrounded_gap(self, candidate_record, job_record, taxonomy, now):
        # 80822 over 70000 is a 15.46% gap
        candidate_record["expected_salary"] = 80822
        result = match(candidate_record, job_record, taxonomy, now)

        assert result.gates.salary is Gate.WARN
        assert result.explainability.top_risks == ("Salary 15% over budget",)
        assert result.to_dict()["constraintFactors"]["salary"]["gap"] == 15.5

    def test_partial_skills(self, candidate_record, job_record, now):
        candidate_record["skills"] = ["Azure"]
        job_record["skills"] = ["Azure", "SCCM"]
        result = match(candidate_record, job_record, (), now)

        assert result.fit_factors.skills.matched == ("azure",)
        assert result.fit_factors.skills.missing == ("sccm",)
        assert result.fit_factors.skills.score == 50

    def test_late_availability_fails(self, candidate_record, job_record, taxonomy, now):
        candidate_record["availability_date"] = (now + timedelta(days=200)).isoformat()
        result = match(candidate_record, job_record, taxonomy, now)

        assert result.gates.availability is Gate.FAIL
        assert result.gates.overall is Gate.FAIL
        assert result.overall_match <= 35
        assert result.explainability.next_action == "Discuss start date"

    def test_warn_caps_at_70(self, candidate_record, job_record, taxonomy, now):
        candidate_record["max_commute_minutes"] = 30
        result = match(candidate_record, job_record, taxonomy, now)

        assert result.gates.commute is Gate.WARN
        assert result.gates.overall is Gate.WARN
        assert result.overall_match == 70
        assert "Check commute distance" in result.explainability.top_risks

    def test_missing_fields_are_neutral(self, job_record, taxonomy, now):
        result = match({"id": "bare"}, job_record, taxonomy, now)

        assert result.gates.to_dict() == {
            "salary": "pass",
            "commute": "pass",
            "workAuth": "pass",
            "availability": "pass",
            "overallGate": "pass",
        }
        assert result.constraint_score == 100

    def test_deterministic(self, candidate_record, job_record, taxonomy, now):
        first = match(candidate_record, job_record, taxonomy, now)
        second = match(candidate_record, job_record, taxonomy, now)

        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_naive_now_read_as_utc(self, candidate_record, job_record, taxonomy, now):
        aware = match(candidate_record, job_record, taxonomy, now)
        naive = match(candidate_record, job_record, taxonomy, now.replace(tzinfo=None))

        assert naive == aware
        assert naive.constraint_factors.start_date.days_until == 10

    def test_scores_in_range(self, candidate_record, job_record, taxonomy, now):
        candidate_record.update(expected_salary=500000, visa_required=True, experience_years=0)
        result = match(candidate_record, job_record, taxonomy, now)

        for value in (result.fit_score, result.constraint_score, result.overall_match):
            assert 0 <= value <= 100
        assert 5 <= result.deal_probability <= 95

    def test_adding_matched_skill_never_lowers_fit(self, candidate_record, job_record, taxonomy, now):
        candidate_record["skills"] = ["Azure"]
        before = match(candidate_record, job_record, taxonomy, now)
        candidate_record["skills"] = ["Azure", "PowerShell"]
        after = match(candidate_record, job_record, taxonomy, now)

        assert after.fit_factors.skills.score >= before.fit_factors.skills.score
        assert after.fit_score >= before.fit_score

    def test_config_changes_result(self, candidate_record, job_record, taxonomy, now):
        config = config_from_dict({"weights": {"fit": 0, "constraints": 1}})
        result = match(candidate_record, job_record, taxonomy, now, config=config)
        assert result.overall_match == 100

    def test_to_dict_shape(self, candidate_record, job_record, taxonomy, now):
        data = match(candidate_record, job_record, taxonomy, now).to_dict()

        assert data["version"] == "v3"
        assert set(data) == {
            "version", "gates", "fitScore", "fitFactors", "constraintScore",
            "constraintFactors", "overallMatch", "dealProbability", "explainability",
        }
        assert data["fitFactors"]["experience"] == {"score": 100, "years": 5, "levelMatch": True, "gap": 0}
        assert data["constraintFactors"]["startDate"] == {"score": 100, "daysUntil": 10}
        assert data["constraintFactors"]["commute"] == {"score": 100, "minutes": 45}


class TestMatchRequest:

    def test_from_dict(self):
        request = MatchRequest.from_dict({"candidateId": " cand-1 ", "jobId": "job-1", "submissionId": None})
        assert request == MatchRequest("cand-1", "job-1", None)

    def test_blank_submission_is_none(self):
        request = MatchRequest.from_dict({"candidateId": "c", "jobId": "j", "submissionId": "  "})
        assert request.submission_id is None

    def test_invalid(self):
        with pytest.raises(ValueError, match="Invalid match request"):
            MatchRequest.from_dict({"candidateId": "c"})
