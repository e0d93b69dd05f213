import base64

from estimation_rpa.automation.selectors import SELECTORS
from estimation_rpa.models.state import StepResult
from estimation_rpa.workflow.steps.context import StepContext

COST_COMPUTE_WAIT_MS = 5000


async def show_cost(ctx: StepContext) -> StepResult:
    button = await ctx.resolver.require("show_cost", SELECTORS["show_cost"], retries=3, delay_ms=1000)
    await button.click()
    await ctx.pause(COST_COMPUTE_WAIT_MS)
    return StepResult.ok("Show Cost button clicked")


async def capture_screenshot(ctx: StepContext) -> dict:
    image = await ctx.driver.screenshot(full_page=True)
    return {"screenshot": base64.b64encode(image).decode("ascii"), "screenshotSize": len(image)}


async def capture_results(ctx: StepContext) -> StepResult:
    shot = await capture_screenshot(ctx)
    ctx.logger.info(f"Captured costing screenshot ({shot['screenshotSize']} bytes)")
    return StepResult.ok("Costing results captured", **shot)
