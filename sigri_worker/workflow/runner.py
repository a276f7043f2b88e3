import logging
import time
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Callable, List, Optional

from sigri_worker.browser.session import BrowserSession
from sigri_worker.config import Settings
from sigri_worker.core.config import utcnow
from sigri_worker.models.job import Job, Outcome
from sigri_worker.models.state import ExtractionState
from sigri_worker.workflow.pipeline import Step, StepContext, build_pipeline, run_pipeline
from sigri_worker.workflow.validation import validate_job

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractContextManager[BrowserSession]]


class ExtractionEngine:
    """Runs the extraction pipeline for one claimed job at a time."""

    def __init__(
        self,
        job_store,
        settings: Settings,
        session_factory: Optional[SessionFactory] = None,
        pipeline: Optional[List[Step]] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.job_store = job_store
        self.settings = settings
        self.session_factory = session_factory or self._playwright_session
        self.pipeline = pipeline if pipeline is not None else build_pipeline()
        self.clock = clock

    def _playwright_session(self):
        # Imported lazily so the engine can be built without a browser installed
        from sigri_worker.browser.playwright_session import open_browser_session

        return open_browser_session(self.settings)

    def run(self, job: Job) -> Outcome:
        """Extract the polygon for ``job``.

        Raises ValidationError before any browser work when the payload is
        malformed, and RequiredStepFailure when a required step fails. The
        browser session is closed on every path.
        """
        request = validate_job(job)
        state = ExtractionState(
            job_id=job.id,
            project_id=request.project_id,
            search_type=request.search.type,
            search_value=request.search.value,
            skipped_steps=[],
        )
        log_extra = {"job_id": job.id, "project_id": request.project_id, "search_type": str(request.search.type)}
        logger.info("Starting ONR/SIG-RI extraction", extra=log_extra)

        t0 = time.perf_counter()
        with self.session_factory() as session:
            ctx = StepContext(
                session=session,
                job_store=self.job_store,
                settings=self.settings,
                state=state,
                clock=self.clock,
            )
            skipped = run_pipeline(self.pipeline, ctx)

        outcome = Outcome(
            artifact_path=state.get("artifact_path"),
            document_id=state.get("document_id"),
            result_metadata=state.get("result_metadata", {}),
            skipped_steps=skipped,
        )
        logger.info(
            "ONR/SIG-RI extraction finished",
            extra={
                **log_extra,
                "document_id": outcome.document_id,
                "downloaded": outcome.downloaded,
                "skipped_steps": skipped,
                "ms": int((time.perf_counter() - t0) * 1000),
            },
        )
        return outcome
