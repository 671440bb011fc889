"""Run an in-process polling worker pool on the pipeline queues.

Usage: python -m jobmatch.scripts.run_worker [queue ...]

Without arguments every pipeline queue is served. Stops on SIGINT/SIGTERM
after the tasks in flight finish.
"""

import signal
import sys
import threading

import structlog

from jobmatch.core.dependencies import build_worker_pool
from jobmatch.schemas.tasks import QUEUE_TASK_TYPES

logger = structlog.get_logger()


def main(argv: list[str]) -> int:
    queue_names = argv or list(QUEUE_TASK_TYPES)
    unknown = [q for q in queue_names if q not in QUEUE_TASK_TYPES]
    if unknown:
        print(f"Unknown queue(s): {', '.join(unknown)}")
        return 1

    stop_event = threading.Event()

    def _stop(signum, frame):
        logger.info("worker_stop_requested", signal=signum)
        stop_event.set()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)

    build_worker_pool().serve(queue_names, stop_event=stop_event)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
