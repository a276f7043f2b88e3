from datetime import datetime
from typing import List, Optional, TypedDict

from sigri_worker.models.job import SearchType


class ExtractionState(TypedDict, total=False):
    """State threaded through the extraction pipeline for one job."""
    job_id: int
    project_id: int
    search_type: SearchType
    search_value: str
    download: Optional[object]
    artifact_path: Optional[str]
    backend_path: Optional[str]
    saved_at: Optional[datetime]
    document_id: Optional[int]
    result_id: Optional[int]
    result_metadata: dict
    skipped_steps: List[str]
