"""Celery transport for the task pipeline.

Run a worker on every pipeline queue with::

    celery -A jobmatch.workers.celery_app worker -Q cv-parsing,job-matching,cover-letter-generation,celery

and the periodic republish with ``celery -A jobmatch.workers.celery_app beat``.
"""

from uuid import UUID

import structlog
from celery import Celery

from jobmatch.core.config import get_settings

logger = structlog.get_logger()
settings = get_settings()

# --- Sentry ---
if settings.SENTRY_DSN:
    import sentry_sdk
    from sentry_sdk.integrations.celery import CeleryIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        integrations=[CeleryIntegration()],
        traces_sample_rate=0.1,
        send_default_pii=False,
    )
    logger.info("sentry_initialized", environment=settings.SENTRY_ENVIRONMENT)

celery_app = Celery(
    "jobmatch",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["jobmatch.workers.pipeline"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    beat_schedule={
        "republish-stalled-tasks": {
            "task": "pipeline.republish",
            "schedule": float(settings.TASK_REPUBLISH_AFTER_SECONDS),
        },
    },
)


def publish_task(queue_name: str, task_id: UUID):
    """Hand a committed task id to the Celery queue of the same name."""
    celery_app.send_task("pipeline.execute", args=[str(task_id)], queue=queue_name)
