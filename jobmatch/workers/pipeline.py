from uuid import UUID

import structlog
from celery import shared_task
from sqlalchemy.exc import SQLAlchemyError

from jobmatch.core.dependencies import build_task_queue, build_worker_pool

logger = structlog.get_logger()


@shared_task(name="pipeline.execute", bind=True, max_retries=3)
def execute_task(self, task_id: str):
    logger.info("pipeline_execute", task_id=task_id)
    try:
        record = build_worker_pool().execute(UUID(task_id))
    except SQLAlchemyError as e:
        # Database trouble is infrastructure, not a processor failure
        logger.error("pipeline_execute_error", task_id=task_id, error=str(e))
        raise self.retry(exc=e, countdown=30)

    if record is None:
        return {"task_id": task_id, "status": "skipped"}
    return {"task_id": task_id, "status": record.status.value}


@shared_task(name="pipeline.republish")
def republish_stalled():
    return {"republished": build_task_queue().republish_stalled()}
