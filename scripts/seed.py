"""Seed a development database and enqueue one task of each type.

Usage: python scripts/seed.py [--force]
"""

import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from jobmatch.core.database import Base, create_db_engine
from jobmatch.core.dependencies import build_task_queue
from jobmatch.models import Application, CandidateProfile, CandidateSkill, JobPosting, JobTag, Task
from jobmatch.schemas.tasks import (
    COVER_LETTER_QUEUE,
    CV_PARSING_QUEUE,
    JOB_MATCHING_QUEUE,
    CoverLetterPayload,
    CvParsePayload,
    MatchPayload,
)

engine = create_db_engine()

NOW = datetime.now(timezone.utc)

SAMPLE_CV = """PROFESSIONAL SUMMARY
Experienced software developer with 5 years of full-stack web development.
Proficient in JavaScript, TypeScript, React, Node.js and Express.

SKILLS
- Frontend: React, HTML, CSS, Tailwind
- Backend: Node.js, Express
- Databases: MongoDB, SQL
- DevOps: Docker, AWS, CI/CD pipelines
- Testing: Jest

EXPERIENCE
Senior Software Engineer | TechCorp Inc. | 2020-Present
- Developed and maintained multiple React applications
- Worked with cross-functional teams in an agile, scrum setting
"""

JOBS = [
    {
        "title": "Frontend Engineer",
        "company_name": "Acme Corp",
        "location": "Remote",
        "salary": "$110k-$130k",
        "description": "Build the customer dashboard in React and TypeScript.",
        "requirements": "3+ years of React, TypeScript, CSS and Jest testing.",
        "tags": ["react", "typescript", "css", "jest"],
    },
    {
        "title": "Platform Engineer",
        "company_name": "Cloudworks",
        "location": "Berlin",
        "salary": None,
        "description": "Operate our Kubernetes clusters on AWS.",
        "requirements": "Docker, Kubernetes, AWS, CI/CD and a devops mindset.",
        "tags": ["docker", "kubernetes", "aws", "ci/cd"],
    },
    {
        "title": "Data Analyst",
        "company_name": None,
        "location": "London",
        "salary": "£50k",
        "description": "Turn product analytics into decisions.",
        "requirements": "SQL, Python, Tableau and strong communication.",
        "tags": ["sql", "python", "tableau", "communication"],
    },
]


def seed():
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        existing = session.execute(select(CandidateProfile).limit(1)).scalar_one_or_none()
        if existing:
            print("DB already has data. Use --force to reset.")
            if "--force" not in sys.argv:
                return
            for model in [Task, Application, CandidateSkill, JobTag, CandidateProfile, JobPosting]:
                session.execute(delete(model))
            session.commit()
            print("Cleaned existing data.")

        cv_path = Path(tempfile.gettempdir()) / "jobmatch_sample_cv.txt"
        cv_path.write_text(SAMPLE_CV, encoding="utf-8")

        candidate = CandidateProfile(
            first_name="Jordan",
            last_name="Lee",
            email="jordan.lee@example.com",
            cv_url=str(cv_path),
        )
        session.add(candidate)

        jobs = []
        for i, data in enumerate(JOBS):
            job = JobPosting(
                title=data["title"],
                company_name=data["company_name"],
                location=data["location"],
                salary=data["salary"],
                description=data["description"],
                requirements=data["requirements"],
                created_at=NOW - timedelta(days=len(JOBS) - i),
            )
            job.tags = [JobTag(name=tag) for tag in data["tags"]]
            session.add(job)
            jobs.append(job)
        session.flush()

        application = Application(candidate_id=candidate.id, job_id=jobs[0].id)
        session.add(application)
        session.commit()

        print(f"=== 1 candidate, {len(jobs)} jobs, 1 application ===")

        candidate_id, job_id, application_id = candidate.id, jobs[0].id, application.id

    queue = build_task_queue()
    task_ids = [
        queue.enqueue(CV_PARSING_QUEUE, CvParsePayload(candidate_id=candidate_id, cv_url=str(cv_path))),
        queue.enqueue(
            JOB_MATCHING_QUEUE,
            MatchPayload(candidate_id=candidate_id, job_id=job_id, application_id=application_id),
        ),
        queue.enqueue(
            COVER_LETTER_QUEUE,
            CoverLetterPayload(application_id=application_id, candidate_id=candidate_id, job_id=job_id),
        ),
    ]

    print(f"\n{'=' * 50}")
    print("Seed done!")
    for task_id in task_ids:
        print(f"  task {task_id}")
    print(f"{'=' * 50}")


if __name__ == "__main__":
    seed()
