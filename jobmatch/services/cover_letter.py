"""Cover letter drafting: a fixed template, optionally replaced by a Claude draft."""

from pathlib import Path

import structlog
from anthropic import Anthropic
from jinja2 import Environment, FileSystemLoader, StrictUndefined

from jobmatch.core.config import Settings, get_settings
from jobmatch.schemas.profiles import CandidateData, JobData

logger = structlog.get_logger()

NAME_PLACEHOLDER = "Applicant"

_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=False,
    undefined=StrictUndefined,
    keep_trailing_newline=False,
)


def compose(candidate: CandidateData, job: JobData) -> str:
    """Fill the cover letter template. Never fails on missing optional fields."""
    tpl = _env.get_template("cover_letter.txt")
    return tpl.render(
        candidate_name=candidate.full_name or NAME_PLACEHOLDER,
        email=candidate.email,
        job_title=job.title,
        company=job.company,
        skills=", ".join(sorted(candidate.skills)),
    ).strip()


def draft_cover_letter(
    candidate: CandidateData,
    job: JobData,
    settings: Settings | None = None,
    client: Anthropic | None = None,
) -> str:
    """Ask Claude for a letter when configured, otherwise use the template.

    The generated draft is only kept if it names both the candidate and the
    job title; anything else falls back to ``compose``.
    """
    settings = settings or get_settings()
    if not settings.ANTHROPIC_API_KEY and client is None:
        return compose(candidate, job)

    try:
        draft = _generate(candidate, job, settings, client)
    except Exception as e:
        logger.warning("cover_letter_generation_error", job_id=str(job.id), error=str(e))
        return compose(candidate, job)

    name = candidate.full_name or NAME_PLACEHOLDER
    if not draft or name not in draft or job.title not in draft:
        logger.warning("cover_letter_generation_unusable", job_id=str(job.id))
        return compose(candidate, job)
    return draft


def _generate(candidate: CandidateData, job: JobData, settings: Settings, client: Anthropic | None) -> str:
    client = client or Anthropic(api_key=settings.ANTHROPIC_API_KEY)
    name = candidate.full_name or NAME_PLACEHOLDER

    response = client.messages.create(
        model=settings.ANTHROPIC_MODEL,
        max_tokens=1200,
        messages=[
            {
                "role": "user",
                "content": f"""Write a professional cover letter for this job application. Reply with the letter text only.

Job title: {job.title}
Company: {job.company}
Job description: {job.description[:1500]}

Applicant name: {name}
Applicant email: {candidate.email or "not provided"}
Applicant skills: {", ".join(sorted(candidate.skills)) or "not provided"}
Applicant experience: {candidate.parsed_text[:2000] or "not provided"}

The letter must use the exact applicant name "{name}" and the exact job title "{job.title}", highlight relevant skills, and explain why the applicant is a good fit.""",
            }
        ],
    )
    return response.content[0].text.strip()
