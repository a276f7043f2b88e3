import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from sigri_worker.browser.session import BrowserSession
from sigri_worker.config import Settings
from sigri_worker.core.config import utcnow
from sigri_worker.core.errors import RequiredStepFailure
from sigri_worker.models.state import ExtractionState
from sigri_worker.workflow import steps

logger = logging.getLogger(__name__)


@dataclass
class StepContext:
    """Everything a step may touch during one run."""
    session: BrowserSession
    job_store: Any
    settings: Settings
    state: ExtractionState
    clock: Callable[[], datetime] = utcnow
    current_step: Optional[str] = None

    @property
    def log_extra(self) -> Dict[str, Any]:
        return {"job_id": self.state.get("job_id"), "step": self.current_step}


@dataclass(frozen=True)
class Step:
    name: str
    action: Callable[[StepContext], None]
    required: bool = True
    when: Optional[Callable[[ExtractionState], bool]] = field(default=None, compare=False)


def build_pipeline() -> List[Step]:
    """Return the canonical extraction step sequence."""
    return [
        Step("authenticate", steps.authenticate),
        Step("open_working_surface", steps.open_working_surface),
        Step("select_search_scope", steps.select_search_scope),
        Step("select_search_type", steps.select_search_type),
        Step("submit_query", steps.submit_query),
        Step("activate_all_layers", steps.activate_all_layers, required=False),
        Step("select_result_feature", steps.select_result_feature, required=False),
        Step("resolve_artifact", steps.resolve_artifact, required=False),
        Step("persist_artifact", steps.persist_artifact, when=steps.has_download),
        Step("persist_outcome", steps.persist_outcome),
    ]


def run_pipeline(pipeline: Sequence[Step], ctx: StepContext) -> List[str]:
    """Run steps in order; return the names of optional steps that failed.

    A failing required step raises RequiredStepFailure carrying its name.
    """
    skipped = ctx.state.setdefault("skipped_steps", [])
    for step in pipeline:
        ctx.current_step = step.name
        if step.when is not None and not step.when(ctx.state):
            logger.info("Step %s not applicable", step.name, extra=ctx.log_extra)
            continue

        logger.info("Step %s started", step.name, extra=ctx.log_extra)
        try:
            step.action(ctx)
        except Exception as e:
            if step.required:
                logger.error("Required step %s failed: %s", step.name, e, extra=ctx.log_extra)
                raise RequiredStepFailure(step.name, str(e)) from e
            logger.warning("Optional step %s skipped: %s", step.name, e, extra=ctx.log_extra)
            skipped.append(step.name)
            continue
        logger.info("Step %s finished", step.name, extra=ctx.log_extra)

    ctx.current_step = None
    return list(skipped)
