from jobmatch.repositories.base import ApplicationRepo, CandidateRepo, JobRepo, TaskRepo
from jobmatch.repositories.sql import SqlUnitOfWork, UnitOfWork, sql_unit_of_work

__all__ = [
    "CandidateRepo",
    "JobRepo",
    "ApplicationRepo",
    "TaskRepo",
    "UnitOfWork",
    "SqlUnitOfWork",
    "sql_unit_of_work",
]
