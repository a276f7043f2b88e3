import functools
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from sigri_worker.core.config import utcnow
from sigri_worker.core.errors import InvalidTransitionError, JobNotFoundError, StorageError
from sigri_worker.db.tables import AutomationJob, AutomationResult, Document as DocumentRow
from sigri_worker.models.job import ALLOWED_TRANSITIONS, Document, Job, JobStatus, Result

logger = logging.getLogger(__name__)

RESULT_FIELDS = ("protocolo", "matricula", "cnm", "cartorio", "data_pedido", "file_path")
DOCUMENT_FIELDS = (
    "project_id",
    "doc_type",
    "stored_filename",
    "original_filename",
    "content_type",
    "description",
    "file_path",
)


def _storage_errors(func_):
    """Surface SQLAlchemy failures as StorageError without retrying."""
    @functools.wraps(func_)
    def wrapper(*args, **kwargs):
        try:
            return func_(*args, **kwargs)
        except SQLAlchemyError as e:
            raise StorageError(f"{func_.__name__} failed: {e}") from e
    return wrapper


class JobStore:
    """Automation job table with lease semantics.

    Jobs are handed out by ``claim``; every claimed job is owned by exactly one
    worker until it reaches COMPLETED or FAILED.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        job_type: str = "ONR_SIGRI_CONSULTA",
        clock: Callable[[], datetime] = utcnow,
    ):
        self._session_factory = session_factory
        self.job_type = job_type
        self._clock = clock

    @_storage_errors
    def claim(self) -> Optional[Job]:
        """Lease the oldest pending job of this store's type, or return None."""
        while True:
            with self._session_factory.begin() as session:
                job_id = session.scalar(
                    select(AutomationJob.id)
                    .where(
                        AutomationJob.status == JobStatus.PENDING,
                        AutomationJob.type == self.job_type,
                    )
                    .order_by(AutomationJob.created_at, AutomationJob.id)
                    .limit(1)
                    .with_for_update(skip_locked=True)
                )
                if job_id is None:
                    return None

                # Guarded transition: a concurrent claimer that got here first leaves rowcount at 0
                claimed = session.execute(
                    update(AutomationJob)
                    .where(AutomationJob.id == job_id, AutomationJob.status == JobStatus.PENDING)
                    .values(status=JobStatus.PROCESSING, started_at=self._clock())
                    .execution_options(synchronize_session=False)
                )
                if claimed.rowcount != 1:
                    continue

                row = session.get(AutomationJob, job_id, populate_existing=True)
                job = Job.model_validate(row)

            logger.info("Job claimed", extra={"job_id": job.id, "job_type": job.type})
            return job

    @_storage_errors
    def set_status(self, job_id: int, status: JobStatus, error_message: Optional[str] = None) -> Job:
        """Move a job forward; repeating a terminal status keeps the first finished_at."""
        status = JobStatus(status)
        with self._session_factory.begin() as session:
            row = session.get(AutomationJob, job_id, with_for_update=True)
            if row is None:
                raise JobNotFoundError(f"Job {job_id} not found")

            current = JobStatus(row.status)
            if current != status and status not in ALLOWED_TRANSITIONS[current]:
                raise InvalidTransitionError(f"Job {job_id}: {current} -> {status} is not allowed")

            row.status = status
            if error_message is not None or current != status:
                row.error_message = error_message
            if status.is_terminal and row.finished_at is None:
                row.finished_at = self._clock()
            session.flush()
            session.refresh(row)
            return Job.model_validate(row)

    @_storage_errors
    def insert_result(self, job_id: int, fields: Dict[str, Any]) -> int:
        """Append a result row for the job and return its id."""
        row = AutomationResult(
            job_id=job_id,
            metadata_json=fields.get("metadata"),
            **{name: fields.get(name) for name in RESULT_FIELDS},
        )
        with self._session_factory.begin() as session:
            session.add(row)
            session.flush()
            return row.id

    @_storage_errors
    def insert_document(self, fields: Dict[str, Any]) -> int:
        """Append a document row and return its generated id."""
        row = DocumentRow(
            matricula_id=None,
            uploaded_at=self._clock(),
            **{name: fields.get(name) for name in DOCUMENT_FIELDS},
        )
        with self._session_factory.begin() as session:
            session.add(row)
            session.flush()
            return row.id

    # Producer side and inspection helpers

    @_storage_errors
    def create_job(
        self,
        payload: Optional[Dict[str, Any]],
        project_id: Optional[int] = None,
        job_type: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> Job:
        row = AutomationJob(
            type=job_type or self.job_type,
            status=JobStatus.PENDING,
            payload=payload,
            project_id=project_id,
            created_at=created_at or self._clock(),
        )
        with self._session_factory.begin() as session:
            session.add(row)
            session.flush()
            session.refresh(row)
            return Job.model_validate(row)

    @_storage_errors
    def get_job(self, job_id: int) -> Optional[Job]:
        with self._session_factory() as session:
            row = session.get(AutomationJob, job_id)
            return Job.model_validate(row) if row is not None else None

    @_storage_errors
    def list_results(self, job_id: int) -> List[Result]:
        with self._session_factory() as session:
            rows = session.scalars(
                select(AutomationResult).where(AutomationResult.job_id == job_id).order_by(AutomationResult.id)
            )
            return [Result.model_validate(row) for row in rows]

    @_storage_errors
    def get_document(self, document_id: int) -> Optional[Document]:
        with self._session_factory() as session:
            row = session.get(DocumentRow, document_id)
            return Document.model_validate(row) if row is not None else None

    @_storage_errors
    def count_documents(self) -> int:
        with self._session_factory() as session:
            return session.scalar(select(func.count()).select_from(DocumentRow))
