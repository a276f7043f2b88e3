import logging
import time
from enum import Enum
from typing import Any, Callable, Optional

from sigri_worker.models.job import Job, JobStatus

logger = logging.getLogger(__name__)


class IterationOutcome(str, Enum):
    IDLE = "idle"
    COMPLETED = "completed"
    FAILED = "failed"
    ERROR = "error"

    def __str__(self):
        return self.value


class Worker:
    """Single-threaded polling consumer of the job table.

    ``claim``, ``process``, ``set_status``, ``sleep`` and ``clock`` are injected
    so the loop can be driven deterministically in tests.
    """

    def __init__(
        self,
        claim: Callable[[], Optional[Job]],
        process: Callable[[Job], Any],
        set_status: Callable[..., Any],
        poll_interval: float = 5.0,
        failure_backoff: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._claim = claim
        self._process = process
        self._set_status = set_status
        self.poll_interval = poll_interval
        self.failure_backoff = failure_backoff
        self._sleep = sleep
        self._clock = clock

    def run_once(self) -> IterationOutcome:
        """Claim and handle at most one job."""
        try:
            job = self._claim()
            if job is None:
                self._sleep(self.poll_interval)
                return IterationOutcome.IDLE
            return self._handle(job)
        except Exception:
            logger.critical("Worker iteration failed", exc_info=True)
            self._sleep(self.failure_backoff)
            return IterationOutcome.ERROR

    def _handle(self, job: Job) -> IterationOutcome:
        started = self._clock()
        try:
            self._process(job)
        except Exception as e:
            logger.error(
                "Job failed: %s", e,
                exc_info=True,
                extra={"job_id": job.id, "error_type": type(e).__name__},
            )
            self._set_status(job.id, JobStatus.FAILED, str(e))
            return IterationOutcome.FAILED

        self._set_status(job.id, JobStatus.COMPLETED)
        logger.info(
            "Job completed",
            extra={"job_id": job.id, "seconds": round(self._clock() - started, 3)},
        )
        return IterationOutcome.COMPLETED

    def run_forever(self, should_continue: Callable[[], bool] = lambda: True) -> None:
        logger.info("Worker started", extra={"poll_interval": self.poll_interval})
        while should_continue():
            self.run_once()
        logger.info("Worker stopped")
