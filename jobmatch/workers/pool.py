import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Iterable
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError

from jobmatch.core.config import Settings, get_settings
from jobmatch.core.exceptions import ProcessorError
from jobmatch.schemas.tasks import TaskRecord, TaskStatus, TaskType, payload_adapter

logger = structlog.get_logger()

CLAIM_BATCH_SIZE = 10


class WorkerPool:
    """Claims tasks, runs the matching handler and records the outcome.

    A task is claimed in its own short transaction. The processor then runs
    without holding a transaction, and the COMPLETED transition is committed
    together with the handler's writes to the owning record. Any exception on
    the way marks the task FAILED with ``{"error": message}``.
    """

    def __init__(self, uow_factory, handlers: dict, settings: Settings | None = None):
        missing = [t.value for t in TaskType if t not in handlers]
        if missing:
            raise ValueError(f"No handler registered for task types: {', '.join(missing)}")
        self.uow_factory = uow_factory
        self.handlers = handlers
        self.settings = settings or get_settings()

    def _lease_cutoff(self) -> datetime:
        return datetime.now(timezone.utc) - timedelta(seconds=self.settings.TASK_LEASE_SECONDS)

    def execute(self, task_id: UUID) -> TaskRecord | None:
        """Run one specific task. Returns ``None`` if it could not be claimed."""
        with self.uow_factory() as uow:
            task = uow.tasks.claim(task_id, self._lease_cutoff())
        if task is None:
            logger.info("task_claim_skipped", task_id=str(task_id))
            return None
        return self._run(task)

    def process_next(self, queue_name: str) -> TaskRecord | None:
        """Claim and run the oldest claimable task on ``queue_name``."""
        cutoff = self._lease_cutoff()
        task = None
        with self.uow_factory() as uow:
            for task_id in uow.tasks.claimable_ids(queue_name, cutoff, CLAIM_BATCH_SIZE):
                task = uow.tasks.claim(task_id, cutoff)
                if task is not None:
                    break
        if task is None:
            return None
        return self._run(task)

    def drain(self, queue_name: str, limit: int | None = None) -> list[TaskRecord]:
        processed = []
        while limit is None or len(processed) < limit:
            record = self.process_next(queue_name)
            if record is None:
                break
            processed.append(record)
        return processed

    def serve(
        self,
        queue_names: Iterable[str],
        concurrency: int | None = None,
        stop_event: threading.Event | None = None,
        poll_interval: float | None = None,
    ):
        """Poll ``queue_names`` from ``concurrency`` threads until ``stop_event`` is set."""
        queue_names = list(queue_names)
        concurrency = concurrency or self.settings.WORKER_CONCURRENCY
        stop_event = stop_event or threading.Event()
        poll_interval = poll_interval if poll_interval is not None else self.settings.WORKER_POLL_INTERVAL_SECONDS

        logger.info("worker_pool_start", queues=queue_names, concurrency=concurrency)
        with ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix="jobmatch-worker") as executor:
            futures = [
                executor.submit(self._poll, queue_names, stop_event, poll_interval)
                for _ in range(concurrency)
            ]
            for future in futures:
                future.result()
        logger.info("worker_pool_stop")

    def _poll(self, queue_names: list[str], stop_event: threading.Event, poll_interval: float):
        while not stop_event.is_set():
            worked = False
            for queue_name in queue_names:
                try:
                    if self.process_next(queue_name) is not None:
                        worked = True
                except SQLAlchemyError as e:
                    logger.error("worker_poll_error", queue=queue_name, error=str(e))
            if not worked:
                stop_event.wait(poll_interval)

    def _run(self, task: TaskRecord) -> TaskRecord:
        log = logger.bind(
            task_id=str(task.id),
            task_type=task.type.value,
            queue=task.queue_name,
            attempt=task.attempts,
        )
        log.info("task_started")
        handler = self.handlers[task.type]

        try:
            payload = payload_adapter.validate_python(task.payload)
            if payload.type != task.type.value:
                raise ProcessorError(f"payload of type {payload.type} on a {task.type.value} task")

            with self.uow_factory() as uow:
                inputs = handler.load(uow, payload)

            result = handler.process(payload, inputs)

            with self.uow_factory() as uow:
                finished = uow.tasks.finish(task.id, TaskStatus.COMPLETED, result)
                if finished:
                    handler.complete(uow, payload, result)
                else:
                    # Another delivery of the same task finished first
                    uow.rollback()
        except Exception as e:
            log.error("task_failed", error=str(e))
            with self.uow_factory() as uow:
                uow.tasks.finish(task.id, TaskStatus.FAILED, {"error": str(e)})
        else:
            if finished:
                log.info("task_completed")
            else:
                log.warning("task_already_finished")

        with self.uow_factory() as uow:
            return uow.tasks.get(task.id)
