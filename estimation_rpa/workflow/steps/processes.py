from typing import Optional

from estimation_rpa.automation.selectors import PROCESS_ADD_CONTROL, SELECTORS, process_row_selectors
from estimation_rpa.models.payload import ProcessSelection
from estimation_rpa.models.state import StepResult
from estimation_rpa.workflow.steps.context import StepContext


def _selection_for(ctx: StepContext) -> ProcessSelection:
    selection = ctx.payload.process_selection
    if selection is not None and not selection.is_empty:
        return selection
    details = ctx.payload.job_details
    ctx.logger.info("No process selection in payload, using defaults for the content type")
    return ctx.processes.processes_for(
        details.content if details else "",
        details.client if details else "",
    )


async def add_process(ctx: StepContext, name: str) -> Optional[str]:
    """Add one process through the grid filter row. Returns an error, or None."""
    filter_box = await ctx.resolver.resolve(SELECTORS["process_filter"])
    if filter_box is None:
        return "process filter not found"
    await filter_box.click()
    await filter_box.fill(name)
    await ctx.pause(2000)

    row = await ctx.resolver.resolve_with_retry(process_row_selectors(name), retries=3, delay_ms=1000)
    if row is None:
        return "not listed in the process grid"
    control = await ctx.resolver.resolve(PROCESS_ADD_CONTROL, scope=row)
    if control is None or not await control.is_visible():
        return "add control not available"
    await control.click()
    await ctx.pause(1000)
    return None


async def add_processes(ctx: StepContext) -> StepResult:
    """Add every selected process; a required one that cannot be added fails the step."""
    selection = _selection_for(ctx)
    await ctx.resolver.optional("process_grid", SELECTORS["process_grid"], retries=3, delay_ms=1000)

    added, warnings = [], []
    for group, process in selection.ordered():
        required = group == "required" or process.is_required
        error = await add_process(ctx, process.name)
        if error is None:
            ctx.logger.info(f"Added process {process.name} ({group})")
            added.append(process.name)
            continue
        if required:
            message = f"Required process '{process.name}' could not be added: {error}"
            ctx.logger.error(message)
            return StepResult.fail(message, errors=[message, *warnings], processesAdded=added, warnings=warnings)
        warning = f"Optional process '{process.name}' not added: {error}"
        ctx.logger.warning(warning)
        warnings.append(warning)

    return StepResult.ok(f"Added {len(added)} processes", processesAdded=added, warnings=warnings)
