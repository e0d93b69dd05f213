"""The sixteen estimation steps, in execution order."""
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List

from langsmith import traceable

from estimation_rpa.automation.driver import ContextClosedError, ElementNotFoundError
from estimation_rpa.models.state import StepResult, WorkflowStep
from estimation_rpa.workflow.steps.auth import company_login, user_login
from estimation_rpa.workflow.steps.content import (
    click_add_content,
    click_add_quantity,
    click_plan,
    enter_quantity,
    select_content,
)
from estimation_rpa.workflow.steps.context import StepContext
from estimation_rpa.workflow.steps.costing import capture_results, capture_screenshot, show_cost
from estimation_rpa.workflow.steps.navigation import navigate_to_erp, open_estimation
from estimation_rpa.workflow.steps.overlays import close_quotation_panel, dismiss_tour
from estimation_rpa.workflow.steps.planning import fill_details, fill_size
from estimation_rpa.workflow.steps.processes import add_processes

logger = logging.getLogger(__name__)

StepFunction = Callable[[StepContext], Awaitable[StepResult]]


@dataclass(frozen=True)
class StepDefinition:
    number: int
    description: str
    action: str
    run: StepFunction

    def new_record(self) -> WorkflowStep:
        return WorkflowStep(step_number=self.number, description=self.description, action=self.action)


STEP_LIBRARY: List[StepDefinition] = [
    StepDefinition(1, "Navigate to ERP system", "navigate", navigate_to_erp),
    StepDefinition(2, "Company login", "company_login", company_login),
    StepDefinition(3, "User login", "user_login", user_login),
    StepDefinition(4, "Navigate to Estimation", "navigate_estimation", open_estimation),
    StepDefinition(5, "Handle tour guide", "handle_tour", dismiss_tour),
    StepDefinition(6, "Close 'Quotation Finalize' panel", "close_popup", close_quotation_panel),
    StepDefinition(7, "Click 'Add Quantity'", "add_quantity", click_add_quantity),
    StepDefinition(8, "Enter quantity", "enter_quantity", enter_quantity),
    StepDefinition(9, "Click 'Add Content'", "add_content", click_add_content),
    StepDefinition(10, "Select content type", "select_content", select_content),
    StepDefinition(11, "Click 'Click me to plan'", "click_plan", click_plan),
    StepDefinition(12, "Fill job size parameters", "fill_size", fill_size),
    StepDefinition(13, "Fill material, printing and finishing details", "fill_details", fill_details),
    StepDefinition(14, "Add production processes", "add_processes", add_processes),
    StepDefinition(15, "Click 'Show Cost'", "show_cost", show_cost),
    StepDefinition(16, "Capture costing results", "capture_results", capture_results),
]


@traceable(name="execute_step")
async def execute_step(step: StepDefinition, ctx: StepContext) -> StepResult:
    """Run one step; whatever it raises comes back as a failed result."""
    ctx.logger.info(f"Executing step {step.number}: {step.description}")
    try:
        result = await step.run(ctx)
    except ElementNotFoundError as e:
        message = f"{e.field.replace('_', ' ').capitalize()} not found"
        ctx.logger.error(f"Step {step.number}: {message}")
        return StepResult.fail(message, errors=[str(e)])
    except ContextClosedError as e:
        ctx.logger.error(f"Step {step.number}: browser context closed")
        return StepResult.fail(f"Browser context closed during {step.action}", errors=[str(e)])
    except Exception as e:
        ctx.logger.error(f"Step {step.number} raised", exc_info=True)
        return StepResult.fail(f"Step {step.number} ({step.action}) failed: {e}", errors=[str(e)])

    if result.success:
        ctx.logger.info(f"Step {step.number} completed: {result.message}")
    else:
        ctx.logger.error(f"Step {step.number} failed: {result.message}")
    return result


__all__ = [
    "STEP_LIBRARY", "StepContext", "StepDefinition", "StepFunction",
    "capture_screenshot", "execute_step",
]
