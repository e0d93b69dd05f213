from estimation_rpa.automation.selectors import SELECTORS
from estimation_rpa.models.state import StepResult
from estimation_rpa.workflow.steps.context import StepContext

TOUR_CLEANUP_SCRIPT = """
() => {
    document.querySelectorAll(
        '.introjs-overlay, .introjs-tooltipReferenceLayer, .introjs-tooltip, .introjs-helperLayer'
    ).forEach(el => el.remove());
    if (window.introJs && window.introJs().exit) {
        window.introJs().exit();
    }
    document.body.classList.remove('introjs-showElement');
    return true;
}
"""


async def dismiss_tour(ctx: StepContext) -> StepResult:
    """Get the onboarding tour out of the way; every method is best effort."""
    await ctx.pause(3000)
    methods = []

    try:
        skip = await ctx.resolver.optional("tour_skip", SELECTORS["tour_skip"])
        if skip is not None:
            await skip.click()
            await ctx.pause(1000)
            methods.append("skip_button")
    except Exception as e:
        ctx.logger.warning(f"Tour skip button click failed: {e}")

    try:
        await ctx.driver.evaluate(TOUR_CLEANUP_SCRIPT)
        await ctx.pause(2000)
        methods.append("overlay_removal")
    except Exception as e:
        ctx.logger.warning(f"Tour overlay removal failed: {e}")

    try:
        await ctx.driver.click("body", force=True)
        await ctx.pause(1000)
        methods.append("background_click")
    except Exception as e:
        ctx.logger.warning(f"Background click failed: {e}")

    return StepResult.ok(f"Tour guide handled ({', '.join(methods) or 'nothing to dismiss'})", tourMethods=methods)


async def close_quotation_panel(ctx: StepContext) -> StepResult:
    close = await ctx.resolver.optional("quotation_panel_close", SELECTORS["quotation_panel_close"])
    if close is None:
        return StepResult.ok("Quotation Finalize panel not present")
    await close.click()
    await ctx.pause(1000)
    return StepResult.ok("Quotation Finalize panel closed")
