from functools import lru_cache

from jobmatch.core.config import Settings, get_settings
from jobmatch.core.database import get_session_factory
from jobmatch.repositories import sql_unit_of_work
from jobmatch.services.queue import TaskQueue
from jobmatch.workers.handlers import default_handlers
from jobmatch.workers.pool import WorkerPool


def get_uow_factory():
    return sql_unit_of_work(get_session_factory())


def build_task_queue(settings: Settings | None = None) -> TaskQueue:
    from jobmatch.workers.celery_app import publish_task

    return TaskQueue(get_uow_factory(), publisher=publish_task, settings=settings)


@lru_cache
def build_worker_pool() -> WorkerPool:
    settings = get_settings()
    return WorkerPool(get_uow_factory(), default_handlers(settings), settings)
