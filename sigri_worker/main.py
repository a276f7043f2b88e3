import logging
import sys

from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from sigri_worker.config import get_settings
from sigri_worker.core.logging import configure_logging
from sigri_worker.db import check_connection, create_db_engine, create_session_factory, init_schema
from sigri_worker.job_store import JobStore
from sigri_worker.worker import Worker
from sigri_worker.workflow import ExtractionEngine

logger = logging.getLogger(__name__)


def build_worker(settings) -> Worker:
    """Wire the job store, extraction engine and polling loop from settings."""
    engine = create_db_engine(settings.DATABASE_URL)
    check_connection(engine)
    if settings.CREATE_SCHEMA:
        init_schema(engine)

    job_store = JobStore(create_session_factory(engine), job_type=settings.JOB_TYPE)
    extraction = ExtractionEngine(job_store, settings)
    return Worker(
        claim=job_store.claim,
        process=extraction.run,
        set_status=job_store.set_status,
        poll_interval=settings.POLL_INTERVAL_SECONDS,
        failure_backoff=settings.FAILURE_BACKOFF_SECONDS,
    )


def main() -> int:
    load_dotenv()
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_FILE_PATH, json=settings.LOG_JSON)
    logger.info("ONR worker starting", extra={"job_type": settings.JOB_TYPE})

    try:
        worker = build_worker(settings)
    except SQLAlchemyError:
        logger.critical("Cannot connect to the automation database", exc_info=True)
        return 1

    try:
        worker.run_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
