from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from sigri_worker.core.errors import ValidationError
from sigri_worker.models.job import Job, SearchType

# Portuguese spelling sent by existing producers for address searches
SEARCH_TYPE_ALIASES = {"ENDERECO": SearchType.ADDRESS, "ENDEREÇO": SearchType.ADDRESS}


class SearchRequest(BaseModel):
    type: SearchType
    value: str = Field(min_length=1)

    @field_validator("type", mode="before")
    def normalize_type(cls, v):
        text = "" if v is None else str(v).strip().upper()
        return SEARCH_TYPE_ALIASES.get(text, text)

    @field_validator("value", mode="before")
    def normalize_value(cls, v):
        return "" if v is None else str(v).strip()


class ExtractionRequest(BaseModel):
    search: SearchRequest
    project_id: int = Field(gt=0)


def _first_error(exc: PydanticValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(x) for x in err.get("loc", ()))
    return f"{loc}: {err.get('msg', 'invalid')}" if loc else err.get("msg", "invalid")


def validate_payload(payload: Optional[Mapping[str, Any]], project_id: Optional[int] = None) -> ExtractionRequest:
    """Check an extraction payload; ``project_id`` falls back to ``payload['project_id']``."""
    if not isinstance(payload, Mapping):
        raise ValidationError("Invalid payload: payload missing")
    search = payload.get("search")
    if not isinstance(search, Mapping) or not search:
        raise ValidationError("Invalid payload: search missing")
    if project_id is None:
        project_id = payload.get("project_id")
    if project_id is None:
        raise ValidationError("Invalid payload: project_id is required")

    try:
        return ExtractionRequest(search=dict(search), project_id=project_id)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid payload: {_first_error(e)}") from e


def validate_job(job: Job) -> ExtractionRequest:
    return validate_payload(job.payload, job.project_id)
