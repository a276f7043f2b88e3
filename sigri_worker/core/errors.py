from typing import Optional


class SigriWorkerError(Exception):
    """Base class for errors raised by the worker."""


class ValidationError(SigriWorkerError):
    """The job payload is malformed. Raised before any browser interaction."""


class StepFailure(SigriWorkerError):
    """A step action could not bring the portal into the expected state."""


class WorkflowError(SigriWorkerError):
    """The extraction run was aborted."""

    def __init__(self, message: str, step: Optional[str] = None):
        super().__init__(message)
        self.step = step


class RequiredStepFailure(WorkflowError):
    """A required pipeline step failed; the whole run is aborted."""

    def __init__(self, step: str, message: str):
        super().__init__(f"{step}: {message}", step=step)


class StorageError(SigriWorkerError):
    """The job store could not complete an operation."""


class JobNotFoundError(StorageError):
    pass


class InvalidTransitionError(StorageError):
    pass
