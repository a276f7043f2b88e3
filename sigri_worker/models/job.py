from enum import Enum
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class JobStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    def __str__(self):
        return self.value

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})

# Legal forward moves; anything else (including a return to PENDING) is rejected.
ALLOWED_TRANSITIONS = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


class SearchType(str, Enum):
    CAR = "CAR"
    ADDRESS = "ADDRESS"

    def __str__(self):
        return self.value


class Job(BaseModel):
    """A row of automation_jobs as seen by the worker."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    status: JobStatus
    payload: Optional[Dict[str, Any]] = None
    project_id: Optional[int] = None
    created_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    error_message: Optional[str] = None


class Result(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: Optional[int] = None
    job_id: int
    protocolo: Optional[str] = None
    matricula: Optional[str] = None
    cnm: Optional[str] = None
    cartorio: Optional[str] = None
    data_pedido: Optional[datetime] = None
    file_path: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="metadata_json")


class Document(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    project_id: int
    matricula_id: Optional[int] = None
    doc_type: str
    stored_filename: str
    original_filename: str
    content_type: str
    description: Optional[str] = None
    file_path: str
    uploaded_at: Optional[datetime] = None


class Outcome(BaseModel):
    """What one extraction run produced."""
    artifact_path: Optional[str] = None
    document_id: Optional[int] = None
    result_metadata: Dict[str, Any] = Field(default_factory=dict)
    skipped_steps: List[str] = Field(default_factory=list)

    @property
    def downloaded(self) -> bool:
        return self.artifact_path is not None
