"""Candidate/job match scoring.

Two scores coexist and are not interchangeable:

* ``score_by_tags`` measures how many of a job's employer-supplied tags the
  candidate holds. Seeker-facing recommendation lists use it.
* ``score_by_text`` measures how many of the candidate's skills appear in the
  job's requirements and description prose. The MATCH task uses it.
"""

from typing import Iterable
from uuid import UUID

import structlog

from jobmatch.core.exceptions import NotFoundError
from jobmatch.schemas.matching import JobRecommendation, MatchResult
from jobmatch.schemas.profiles import CandidateData, JobData
from jobmatch.services.text import contains_phrase, normalize, normalize_terms

logger = structlog.get_logger()


def percentage(matched: int, total: int) -> int:
    """``round(100 * matched / total)`` with halves rounded up; 0 when ``total`` is 0."""
    if total <= 0:
        return 0
    return (200 * matched + total) // (2 * total)


def score_by_tags(skills: Iterable[str], job: JobData) -> tuple[int, set[str]]:
    job_tags = normalize_terms(job.tags)
    matching = job_tags & normalize_terms(skills)
    return percentage(len(matching), len(job_tags)), matching


def score_by_text(skills: Iterable[str], job: JobData) -> tuple[int, set[str]]:
    skill_set = normalize_terms(skills)
    text = normalize(f"{job.requirements or ''} {job.description or ''}")
    matching = {skill for skill in skill_set if contains_phrase(text, skill)}
    return percentage(len(matching), max(1, len(skill_set))), matching


def match_candidate(candidate: CandidateData, job: JobData) -> MatchResult:
    score, matching = score_by_text(candidate.skills, job)
    return MatchResult(
        candidate_id=candidate.id,
        job_id=job.id,
        score=score,
        matching_skills=sorted(matching),
    )


def rank_matches(candidate: CandidateData, jobs: Iterable[JobData]) -> list[MatchResult]:
    results = [match_candidate(candidate, job) for job in jobs]
    # sorted() is stable: equal scores keep job order
    return sorted(results, key=lambda r: r.score, reverse=True)


def recommend_jobs(candidate: CandidateData, jobs: Iterable[JobData]) -> list[JobRecommendation]:
    recommendations = []
    for job in jobs:
        score, matching = score_by_tags(candidate.skills, job)
        recommendations.append(
            JobRecommendation(
                id=job.id,
                title=job.title,
                company=job.company,
                location=job.location,
                salary=job.salary,
                match_score=score,
                matching_skills=sorted(matching),
                posted_at=job.created_at,
            )
        )
    return sorted(recommendations, key=lambda r: r.match_score, reverse=True)


def get_job_recommendations(uow_factory, candidate_id: UUID) -> list[JobRecommendation]:
    """Rank every job posting for a candidate by tag overlap, best first."""
    with uow_factory() as uow:
        candidate = uow.candidates.get(candidate_id)
        if candidate is None:
            raise NotFoundError("candidate", candidate_id)
        jobs = uow.jobs.list_all()

    recommendations = recommend_jobs(candidate, jobs)
    logger.info(
        "job_recommendations",
        candidate_id=str(candidate_id),
        jobs_considered=len(jobs),
    )
    return recommendations
