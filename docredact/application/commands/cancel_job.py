"""CancelJob Command - Requests cooperative cancellation of a running job."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

from docredact.application.job_store import JobStore
from docredact.domain.exceptions import EntityNotFoundError, JobStateConflictError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CancelJobCommand:
    job_id: str


class CancelJobHandler:
    """Handles CancelJob commands.

    Pages already being extracted finish; nothing new is scheduled.
    """

    def __init__(self, job_store: JobStore):
        self._jobs = job_store

    def handle(self, command: CancelJobCommand) -> Dict[str, Any]:
        job = self._jobs.get(command.job_id)
        if job is None:
            raise EntityNotFoundError("Job", command.job_id)
        if job.is_terminal:
            raise JobStateConflictError(command.job_id, job.state.value, "cancel")

        job.cancellation.cancel()
        logger.info("Cancellation requested for job %s in state %s", command.job_id, job.state.value)
        return {"job_id": command.job_id, "cancel_requested": True, "state": job.state.value}
