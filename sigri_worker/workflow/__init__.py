from .pipeline import Step, StepContext, build_pipeline, run_pipeline
from .runner import ExtractionEngine
from .validation import validate_job, validate_payload

__all__ = [
    'ExtractionEngine',
    'Step',
    'StepContext',
    'build_pipeline',
    'run_pipeline',
    'validate_job',
    'validate_payload',
]
