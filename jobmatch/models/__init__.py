from jobmatch.models.application import Application
from jobmatch.models.candidate import CandidateProfile, CandidateSkill
from jobmatch.models.job import JobPosting, JobTag
from jobmatch.models.task import Task

__all__ = [
    "CandidateProfile",
    "CandidateSkill",
    "JobPosting",
    "JobTag",
    "Application",
    "Task",
]
