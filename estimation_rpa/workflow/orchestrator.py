import logging
from typing import Optional, Sequence

from langsmith import traceable

from estimation_rpa.automation.driver import UIDriver
from estimation_rpa.config import Settings, settings
from estimation_rpa.models.payload import JobPayload
from estimation_rpa.models.state import AggregateResult, RunPhase
from estimation_rpa.workflow.graph import create_workflow, initial_state
from estimation_rpa.workflow.steps import STEP_LIBRARY, StepContext, StepDefinition

logger = logging.getLogger(__name__)


class WorkflowOrchestrator:
    """Runs the estimation steps in order against one UI session.

    `run` never raises: step faults become failed steps and faults in the
    graph machinery become a failed aggregate result.
    """

    def __init__(
        self,
        steps: Sequence[StepDefinition] = STEP_LIBRARY,
        step_delay_seconds: Optional[float] = None,
        config: Settings = settings,
    ):
        self.steps = list(steps)
        self.config = config
        delay = config.STEP_DELAY_SECONDS if step_delay_seconds is None else step_delay_seconds
        self.settle_ms = int(delay * 1000)

    @traceable(name="estimation_workflow")
    async def run(
        self,
        driver: UIDriver,
        payload: JobPayload,
        job_logger: Optional[logging.Logger] = None,
    ) -> AggregateResult:
        log = job_logger or logger
        total = len(self.steps)
        ctx = StepContext.create(driver, payload, self.config, log)
        log.info(f"Starting estimation workflow ({total} steps)")

        try:
            graph = create_workflow(self.steps, ctx, self.settle_ms)
            final = await graph.ainvoke(initial_state(), {"recursion_limit": total + 10})
        except Exception as e:
            log.error(f"Workflow machinery failed: {e}", exc_info=True)
            return AggregateResult(
                success=False,
                message=f"Workflow error: {e}",
                errors=[str(e)],
                data={"completedSteps": 0, "totalSteps": total},
            )

        steps = final["steps"]
        success = final["phase"] == RunPhase.SUCCEEDED
        data = dict(final["context"])
        data.update(
            workflowSteps=[s.model_dump(mode="json") for s in steps],
            completedSteps=sum(1 for s in steps if s.is_completed),
            totalSteps=total,
        )
        if success:
            log.info(final["message"])
        else:
            log.error(final["message"])
        return AggregateResult(
            success=success,
            message=final["message"],
            steps=steps,
            data=data,
            errors=list(final["errors"]),
        )
