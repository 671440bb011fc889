"""Error taxonomy of the matching pipeline.

Execution-time errors never reach the caller that enqueued the work: the
worker pool records them on the task as ``{"error": message}``.
"""


class JobMatchError(Exception):
    """Base class for pipeline errors."""


class NotFoundError(JobMatchError):
    """A referenced candidate, job, application or task does not exist."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class ExternalServiceError(JobMatchError):
    """An optional external service was unreachable or answered unusably."""


class ProcessorError(JobMatchError):
    """A processor could not produce a result for its input."""
