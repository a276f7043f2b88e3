import pytest

from sigri_worker.models.job import JobStatus
from sigri_worker.worker import IterationOutcome, Worker
from sigri_worker.workflow import ExtractionEngine


@pytest.fixture
def build_worker(job_store, settings, clock):
    def build(browser):
        engine = ExtractionEngine(job_store, settings, session_factory=browser.factory, clock=clock)
        sleeps = []
        worker = Worker(
            claim=job_store.claim,
            process=engine.run,
            set_status=job_store.set_status,
            poll_interval=5,
            failure_backoff=10,
            sleep=sleeps.append,
        )
        return worker, sleeps
    return build


@pytest.mark.e2e
class TestEndToEnd:
    """Worker loop, extraction engine and job store wired together."""

    def test_successful_job(self, job_store, build_worker, make_portal, car_payload):
        job = job_store.create_job(car_payload, project_id=7)
        worker, sleeps = build_worker(make_portal())

        assert worker.run_once() == IterationOutcome.COMPLETED
        done = job_store.get_job(job.id)
        assert done.status == JobStatus.COMPLETED
        assert done.started_at is not None
        assert done.finished_at is not None
        assert done.error_message is None
        assert job_store.count_documents() == 1

        assert worker.run_once() == IterationOutcome.IDLE
        assert sleeps == [5]

    def test_no_polygon_is_still_completed(self, job_store, build_worker, make_portal, car_payload):
        job = job_store.create_job(car_payload, project_id=7)
        worker, _ = build_worker(make_portal(with_download=False))

        assert worker.run_once() == IterationOutcome.COMPLETED
        assert job_store.get_job(job.id).status == JobStatus.COMPLETED
        assert job_store.list_results(job.id)[0].file_path is None
        assert job_store.count_documents() == 0

    def test_invalid_payload_fails_job(self, job_store, build_worker, make_portal):
        job = job_store.create_job({"search": {"type": "FOO", "value": "x"}}, project_id=7)
        browser = make_portal()
        worker, _ = build_worker(browser)

        assert worker.run_once() == IterationOutcome.FAILED
        failed = job_store.get_job(job.id)
        assert failed.status == JobStatus.FAILED
        assert "search.type" in failed.error_message
        assert browser.opened == 0
        assert job_store.list_results(job.id) == []

    def test_required_step_failure_fails_job(self, job_store, build_worker, make_portal, car_payload):
        job = job_store.create_job(car_payload, project_id=7)
        browser = make_portal(with_input=False)
        worker, _ = build_worker(browser)

        assert worker.run_once() == IterationOutcome.FAILED
        failed = job_store.get_job(job.id)
        assert failed.status == JobStatus.FAILED
        assert failed.error_message.startswith("submit_query: ")
        assert browser.closed

    def test_jobs_are_processed_in_creation_order(self, job_store, build_worker, make_portal, car_payload):
        first = job_store.create_job(car_payload, project_id=1)
        second = job_store.create_job(car_payload, project_id=2)
        worker, _ = build_worker(make_portal())

        worker.run_once()
        assert job_store.get_job(first.id).status == JobStatus.COMPLETED
        assert job_store.get_job(second.id).status == JobStatus.PENDING
        worker.run_once()
        assert job_store.get_job(second.id).status == JobStatus.COMPLETED
