import pytest

from sigri_worker.core.errors import ValidationError
from sigri_worker.models.job import Job, JobStatus, SearchType
from sigri_worker.workflow.validation import validate_job, validate_payload


@pytest.mark.unit
class TestPayloadValidation:
    def test_valid_car_payload(self):
        request = validate_payload({"search": {"type": "CAR", "value": "123"}, "project_id": 7})
        assert request.search.type == SearchType.CAR
        assert request.search.value == "123"
        assert request.project_id == 7

    def test_type_and_value_are_normalized(self):
        request = validate_payload({"search": {"type": " address ", "value": "  Rua A, 10 "}}, project_id=3)
        assert request.search.type == SearchType.ADDRESS
        assert request.search.value == "Rua A, 10"

    def test_endereco_alias(self):
        request = validate_payload({"search": {"type": "ENDERECO", "value": "Rua B"}}, project_id=3)
        assert request.search.type == SearchType.ADDRESS

    def test_numeric_value_is_accepted_as_text(self):
        request = validate_payload({"search": {"type": "CAR", "value": 123}}, project_id=3)
        assert request.search.value == "123"

    @pytest.mark.parametrize(
        "payload, message",
        [
            ({"search": {"type": "FOO", "value": "x"}, "project_id": 7}, "search.type"),
            ({"search": {}, "project_id": 7}, "search missing"),
            ({"project_id": 7}, "search missing"),
            ({"search": {"type": "CAR", "value": "123"}}, "project_id"),
            ({"search": {"type": "CAR", "value": "   "}, "project_id": 7}, "search.value"),
            ({"search": {"type": "CAR", "value": "1"}, "project_id": 0}, "project_id"),
            (None, "payload missing"),
        ],
    )
    def test_invalid_payloads(self, payload, message):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(payload)
        assert message in str(exc_info.value)

    def test_job_column_project_id_wins(self):
        job = Job(
            id=1,
            type="ONR_SIGRI_CONSULTA",
            status=JobStatus.PROCESSING,
            payload={"search": {"type": "CAR", "value": "123"}, "project_id": 99},
            project_id=7,
        )
        assert validate_job(job).project_id == 7

    def test_job_falls_back_to_payload_project_id(self):
        job = Job(
            id=1,
            type="ONR_SIGRI_CONSULTA",
            status=JobStatus.PROCESSING,
            payload={"search": {"type": "CAR", "value": "123"}, "project_id": 7},
        )
        assert validate_job(job).project_id == 7
