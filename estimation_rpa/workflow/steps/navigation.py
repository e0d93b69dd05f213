from estimation_rpa.automation.driver import ContextClosedError, NavigationTimeoutError
from estimation_rpa.automation.selectors import SELECTORS
from estimation_rpa.core.config import NAVIGATION_TIMEOUT_MS
from estimation_rpa.models.state import StepResult
from estimation_rpa.workflow.steps.context import StepContext


async def navigate_to_erp(ctx: StepContext) -> StepResult:
    """Open the ERP login page, trying the base URL then each alternative."""
    urls = [ctx.settings.ERP_BASE_URL, *ctx.settings.ERP_ALTERNATIVE_URLS]
    errors = []
    timed_out = 0

    for url in urls:
        ctx.logger.info(f"Navigating to {url}")
        try:
            await ctx.driver.navigate(url, NAVIGATION_TIMEOUT_MS)
        except NavigationTimeoutError as e:
            ctx.logger.warning(f"Navigation to {url} timed out")
            timed_out += 1
            errors.append(str(e))
            continue
        except ContextClosedError:
            raise
        except Exception as e:
            ctx.logger.warning(f"Navigation to {url} failed: {e}")
            errors.append(str(e))
            continue

        title = await ctx.driver.title()
        return StepResult.ok(f"Navigated to ERP system ({title})", currentUrl=ctx.driver.url, pageTitle=title)

    if timed_out == len(urls):
        ctx.logger.error("ERP server may be offline or inaccessible")
        return StepResult.fail(
            f"Network timeout connecting to ERP server at {urls[0]}. Server may be offline or network blocked.",
            errors=["Network connectivity issue", "ERP server timeout", *errors],
        )
    return StepResult.fail(f"Failed to navigate to ERP system: {errors[-1]}", errors=errors)


async def open_estimation(ctx: StepContext) -> StepResult:
    menu = await ctx.resolver.require("sidebar_menu", SELECTORS["sidebar_menu"], retries=3, delay_ms=1000)
    await menu.click()
    await ctx.pause(1000)

    link = await ctx.resolver.require("estimation_link", SELECTORS["estimation_link"], retries=3, delay_ms=1000)
    await link.click()
    await ctx.pause(3000)
    return StepResult.ok("Navigated to Estimation module", currentUrl=ctx.driver.url)
