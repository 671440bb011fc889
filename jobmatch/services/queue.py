"""Durable named task queues backed by the ``tasks`` table."""

from datetime import datetime, timedelta, timezone
from typing import Callable
from uuid import UUID

import structlog

from jobmatch.core.config import Settings, get_settings
from jobmatch.core.exceptions import NotFoundError
from jobmatch.schemas.tasks import (
    QUEUE_TASK_TYPES,
    TaskRecord,
    TaskStatusResponse,
    payload_adapter,
)

logger = structlog.get_logger()

Publisher = Callable[[str, UUID], None]


class TaskQueue:
    def __init__(self, uow_factory, publisher: Publisher | None = None, settings: Settings | None = None):
        self.uow_factory = uow_factory
        self.publisher = publisher
        self.settings = settings or get_settings()

    def enqueue(self, queue_name: str, payload) -> UUID:
        """Create a PENDING task on ``queue_name`` and return its id.

        ``payload`` is a payload model or a mapping carrying a ``type`` key.
        """
        expected = QUEUE_TASK_TYPES.get(queue_name)
        if expected is None:
            raise ValueError(f"Unknown queue: {queue_name}")

        model = payload_adapter.validate_python(payload)
        if model.type != expected.value:
            raise ValueError(f"Queue {queue_name} does not accept {model.type} tasks")

        with self.uow_factory() as uow:
            task = uow.tasks.add(queue_name, model.type, model.model_dump(mode="json"))

        logger.info("task_enqueued", task_id=str(task.id), task_type=model.type, queue=queue_name)
        self._publish(task)
        return task.id

    def get(self, task_id: UUID) -> TaskRecord:
        with self.uow_factory() as uow:
            task = uow.tasks.get(task_id)
        if task is None:
            raise NotFoundError("task", task_id)
        return task

    def get_status(self, task_id: UUID) -> TaskStatusResponse:
        task = self.get(task_id)
        return TaskStatusResponse(status=task.status, result=task.result)

    def republish_stalled(self) -> int:
        """Publish again every task a worker should have picked up by now."""
        now = datetime.now(timezone.utc)
        pending_before = now - timedelta(seconds=self.settings.TASK_REPUBLISH_AFTER_SECONDS)
        lease_cutoff = now - timedelta(seconds=self.settings.TASK_LEASE_SECONDS)

        with self.uow_factory() as uow:
            stalled = uow.tasks.stalled(pending_before, lease_cutoff)

        for task in stalled:
            self._publish(task)
        if stalled:
            logger.info("tasks_republished", count=len(stalled))
        return len(stalled)

    def _publish(self, task: TaskRecord):
        if self.publisher is None:
            return
        try:
            self.publisher(task.queue_name, task.id)
        except Exception as e:
            # The row is durable; the periodic republish picks it up later
            logger.warning("task_publish_failed", task_id=str(task.id), queue=task.queue_name, error=str(e))
