"""
Tests for explain.py - reasons, risks and next action.
"""

from matchscore.explain import explain, next_action, top_reasons, top_risks
from matchscore.gates import Gate, GateResults
from matchscore.result import (
    CommuteFactor,
    ConstraintFactors,
    ExperienceFactor,
    FitFactors,
    IndustryFactor,
    SalaryFactor,
    SkillsFactor,
    StartDateFactor,
)


def gates(salary=Gate.PASS, commute=Gate.PASS, work_auth=Gate.PASS, availability=Gate.PASS, overall=None):
    if overall is None:
        signals = (salary, commute, work_auth, availability)
        overall = Gate.FAIL if Gate.FAIL in signals else Gate.WARN if Gate.WARN in signals else Gate.PASS
    return GateResults(salary, commute, work_auth, availability, overall)


def fit(matched=(), missing=(), years=5, level_match=True):
    return FitFactors(
        skills=SkillsFactor(score=50, matched=tuple(matched), missing=tuple(missing)),
        experience=ExperienceFactor(score=100 if level_match else 70, years=years, level_match=level_match, gap=0),
        industry=IndustryFactor(score=50),
    )


def constraints(salary_score=100, gap=0, days=0):
    return ConstraintFactors(
        salary=SalaryFactor(score=salary_score, gap=gap, negotiable=0 < gap <= 20),
        commute=CommuteFactor(score=100, minutes=30),
        start_date=StartDateFactor(score=100, days_until=days),
    )


class TestTopReasons:

    def test_ordered_and_limited_to_three(self):
        reasons = top_reasons(fit(matched=("azure", "sccm", "powershell", "intune")), constraints())
        assert reasons == [
            "4 skill matches: azure, sccm, powershell",
            "Experience fits: 5 years",
            "Salary expectation within budget",
        ]

    def test_short_notice_reason(self):
        reasons = top_reasons(fit(level_match=False), constraints(salary_score=40, gap=30, days=10))
        assert reasons == ["Available at short notice"]

    def test_fractional_years(self):
        reasons = top_reasons(fit(years=2.5), constraints(days=90))
        assert reasons[0] == "Experience fits: 2.5 years"

    def test_nothing_to_say(self):
        assert top_reasons(fit(level_match=False), constraints(salary_score=40, gap=30, days=90)) == []


class TestTopRisks:

    def test_missing_skills_first(self):
        risks = top_risks(gates(salary=Gate.WARN), fit(missing=("go", "rust", "terraform")), constraints(salary_score=64, gap=18))
        assert risks == ["Missing: go, rust", "Salary 18% over budget"]

    def test_salary_gap_rounds_half_up(self):
        risks = top_risks(gates(salary=Gate.FAIL), fit(), constraints(salary_score=0, gap=35.5))
        assert risks == ["Salary 36% over budget"]

    def test_salary_gap_rounded_once_from_raw_value(self):
        risks = top_risks(gates(salary=Gate.WARN), fit(), constraints(salary_score=69, gap=15.46))
        assert risks == ["Salary 15% over budget"]

    def test_availability_and_commute(self):
        risks = top_risks(gates(commute=Gate.WARN, availability=Gate.WARN), fit(), constraints(days=90))
        assert risks == ["Available only in 90 days", "Check commute distance"]

    def test_at_most_two(self):
        risks = top_risks(
            gates(salary=Gate.WARN, commute=Gate.WARN, availability=Gate.WARN),
            fit(missing=("go",)),
            constraints(salary_score=64, gap=18, days=90),
        )
        assert len(risks) == 2

    def test_no_risks(self):
        assert top_risks(gates(), fit(), constraints()) == []


class TestNextAction:

    def test_pass_invites(self):
        assert next_action(gates()) == ("Invite candidate to interview", None)

    def test_warn_clarifies(self):
        assert next_action(gates(commute=Gate.WARN)) == ("Contact candidate for clarification", None)

    def test_salary_fail(self):
        assert next_action(gates(salary=Gate.FAIL)) == (
            "Clarify salary flexibility",
            "Salary expectation well above budget",
        )

    def test_work_auth_fail(self):
        assert next_action(gates(work_auth=Gate.FAIL)) == ("Clarify visa sponsorship", "Visa required but not offered")

    def test_availability_fail(self):
        assert next_action(gates(availability=Gate.FAIL)) == ("Discuss start date", "Availability too late")

    def test_salary_takes_priority(self):
        action, why_not = next_action(gates(salary=Gate.FAIL, work_auth=Gate.FAIL, availability=Gate.FAIL))
        assert action == "Clarify salary flexibility"
        assert why_not == "Salary expectation well above budget"


class TestExplain:

    def test_why_not_only_on_fail(self):
        passing = explain(gates(), fit(), constraints())
        assert passing.why_not is None
        assert "whyNot" not in passing.to_dict()

        failing = explain(gates(work_auth=Gate.FAIL), fit(), constraints())
        assert failing.to_dict()["whyNot"] == "Visa required but not offered"
