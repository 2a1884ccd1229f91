"""Blueprint job poller.

Drives a submitted job from ``pending``/``running`` to a terminal state with
exponential backoff, an overall deadline and caller cancellation. The job is
only ever changed by applying status responses from the server.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from ..errors import ErrorKind, JobFailedError, StacksFinderError
from ..models import Blueprint, Job, JobStatus, JobUpdate
from . import stacksfinder
from .remote import RemoteClient

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_INTERVAL = 1.0
DEFAULT_MAX_INTERVAL = 8.0
DEFAULT_BACKOFF = 2.0
DEFAULT_DEADLINE = 60.0

# Terminal states accept nothing.
_ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset(JobStatus),
    JobStatus.RUNNING: frozenset({JobStatus.RUNNING, JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED}),
}


class CancellationToken:
    """Set by the caller to stop waiting; checked once per poll iteration."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


def apply_update(job: Job, update: JobUpdate) -> Job:
    """Return ``job`` with the fields the server sent applied."""
    allowed = _ALLOWED_TRANSITIONS.get(job.status, frozenset())
    if update.status not in allowed:
        raise StacksFinderError(
            ErrorKind.API_ERROR,
            f"Invalid job transition for {job.job_id}: {job.status.value} -> {update.status.value}",
        )
    if update.status != job.status:
        logger.debug("Job %s: %s -> %s", job.job_id, job.status.value, update.status.value)
    return job.model_copy(update=update.model_dump(exclude_unset=True, exclude_none=True))


class JobPoller:
    """Submit-poll-resolve loop for blueprint jobs."""

    def __init__(
        self,
        client: RemoteClient,
        *,
        initial_interval: float = DEFAULT_INITIAL_INTERVAL,
        max_interval: float = DEFAULT_MAX_INTERVAL,
        backoff: float = DEFAULT_BACKOFF,
        deadline: float = DEFAULT_DEADLINE,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._client = client
        self._initial_interval = initial_interval
        self._max_interval = max_interval
        self._backoff = backoff
        self._deadline = deadline
        self._sleep = sleep
        self._clock = clock

    async def submit(self, body: dict) -> Job:
        return await stacksfinder.create_blueprint(self._client, body)

    async def wait(self, job: Job, cancel: Optional[CancellationToken] = None) -> Job:
        """Poll until ``job`` is terminal.

        Raises CANCELLED when the token is set and TIMEOUT when the deadline
        passes; the remote job itself keeps running in both cases.
        """
        started = self._clock()
        interval = self._initial_interval
        polls = 0

        while not job.is_terminal:
            if cancel is not None and cancel.cancelled:
                raise StacksFinderError(
                    ErrorKind.CANCELLED,
                    f"Stopped waiting for job {job.job_id}",
                    ["The job keeps running server-side. Fetch the blueprint later with get_blueprint."],
                )
            remaining = self._deadline - (self._clock() - started)
            if remaining <= 0:
                raise StacksFinderError(
                    ErrorKind.TIMEOUT,
                    f"Blueprint generation timed out after {self._deadline:g} seconds",
                    [f"Job {job.job_id} is still running. Use get_blueprint with the job resultRef to check later."],
                )

            await self._sleep(min(interval, remaining))
            interval = min(interval * self._backoff, self._max_interval)

            update = await stacksfinder.job_status(self._client, job.job_id)
            polls += 1
            logger.debug("Poll %d for job %s: %s (%s%%)", polls, job.job_id, update.status.value, update.progress)
            job = apply_update(job, update)

        return job

    async def resolve(self, job: Job) -> Blueprint:
        """Turn a terminal job into its blueprint, or raise its failure."""
        if job.status == JobStatus.COMPLETED:
            if job.result is not None:
                return stacksfinder.parse_payload(Blueprint, job.result, "blueprint")
            if job.result_ref:
                return await stacksfinder.get_blueprint(self._client, job.result_ref)
            raise StacksFinderError(ErrorKind.API_ERROR, "Job completed but no blueprint ID returned")
        if job.status in (JobStatus.FAILED, JobStatus.CANCELLED):
            raise JobFailedError(job.job_id, job.status.value, job.error_code, job.error_message)
        raise StacksFinderError(ErrorKind.API_ERROR, f"Job {job.job_id} is not finished (status: {job.status.value})")

    async def run(self, body: dict, cancel: Optional[CancellationToken] = None) -> tuple[Job, Blueprint]:
        job = await self.submit(body)
        job = await self.wait(job, cancel)
        return job, await self.resolve(job)
