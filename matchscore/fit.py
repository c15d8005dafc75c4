"""
Fit Scoring.

Responsibilities:
- Score skills (direct, transferable, missing), experience band and
  industry overlap.
- Combine the three sub-scores with the configured fit weights.

Non-Responsibilities:
- No gate logic.
- No persistence.

Invariant:
Adding a matched required skill never lowers the skills or fit score.
"""

from .config import FitWeights
from .models import Candidate, Job
from .normalize import clamp_score, normalize_skills, normalize_text, substring_match
from .result import ExperienceFactor, FitFactors, IndustryFactor, SkillsFactor
from .taxonomy import SkillTransferabilityIndex

TRANSFERABLE_CREDIT = 0.7
EXPERIENCE_GAP_PENALTY = 15
OVERQUALIFIED_SLACK_YEARS = 5
OVERQUALIFIED_SCORE = 70
INDUSTRY_BASE_SCORE = 50


def score_skills(candidate: Candidate, job: Job, index: SkillTransferabilityIndex) -> SkillsFactor:
    candidate_skills = normalize_skills(candidate.skills)
    job_skills = normalize_skills(job.skills)

    matched, missing, transferable = [], [], []
    for skill in job_skills:
        if any(substring_match(cs, skill) for cs in candidate_skills):
            matched.append(skill)
        elif index.transfers(skill, candidate_skills):
            transferable.append(skill)
        else:
            missing.append(skill)

    total = len(job_skills) or 1
    score = clamp_score((len(matched) + len(transferable) * TRANSFERABLE_CREDIT) / total * 100)
    return SkillsFactor(
        score=score,
        matched=tuple(matched),
        missing=tuple(missing),
        transferable=tuple(transferable),
    )


def score_experience(candidate: Candidate, job: Job) -> ExperienceFactor:
    years = candidate.experience_years or 0
    if years < job.experience_min:
        gap = job.experience_min - years
        return ExperienceFactor(
            score=clamp_score(100 - gap * EXPERIENCE_GAP_PENALTY),
            years=years,
            level_match=False,
            gap=gap,
        )
    if years > job.experience_max + OVERQUALIFIED_SLACK_YEARS:
        return ExperienceFactor(score=OVERQUALIFIED_SCORE, years=years, level_match=False, gap=0)
    return ExperienceFactor(score=100, years=years, level_match=True, gap=0)


def score_industry(candidate: Candidate, job: Job) -> IndustryFactor:
    if not job.industry:
        return IndustryFactor(score=INDUSTRY_BASE_SCORE)

    wanted = normalize_text(job.industry)
    tags = [normalize_text(i) for i in candidate.industry_experience]
    if any(substring_match(tag, wanted) for tag in tags):
        return IndustryFactor(score=100, industries=(job.industry,))
    return IndustryFactor(score=INDUSTRY_BASE_SCORE)


def score_fit(
    candidate: Candidate, job: Job, index: SkillTransferabilityIndex, weights: FitWeights
) -> tuple[int, FitFactors]:
    """Return the combined fit score and its sub-factor breakdown."""
    factors = FitFactors(
        skills=score_skills(candidate, job, index),
        experience=score_experience(candidate, job),
        industry=score_industry(candidate, job),
    )
    combined = (
        factors.skills.score * weights.skills
        + factors.experience.score * weights.experience
        + factors.industry.score * weights.industry
    )
    return clamp_score(combined), factors
