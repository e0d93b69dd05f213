from estimation_rpa.automation.driver import ContextClosedError
from estimation_rpa.automation.selectors import NUMERIC_PATTERN, SELECTORS, FieldSpec, content_selectors
from estimation_rpa.models.state import StepResult
from estimation_rpa.workflow.steps.context import StepContext

CONTENT_SELECTION_ATTEMPTS = 3
CONTENT_RETRY_COOLDOWN_MS = 2000


def quantity_field() -> FieldSpec:
    return FieldSpec("quantity", SELECTORS["quantity_input"], required=True, validation_pattern=NUMERIC_PATTERN)


async def click_add_quantity(ctx: StepContext) -> StepResult:
    button = await ctx.resolver.require("add_quantity", SELECTORS["add_quantity"], retries=3, delay_ms=1000)
    await button.click()
    await ctx.pause(2000)
    return StepResult.ok("Add Quantity button clicked")


async def enter_quantity(ctx: StepContext) -> StepResult:
    details = ctx.payload.job_details
    if details is None or details.quantity is None:
        return StepResult.fail("Job details not provided")

    outcome = await ctx.forms.fill_input(quantity_field(), details.quantity)
    if not outcome.ok:
        return StepResult.fail(f"Quantity not entered: {outcome.error}", errors=[outcome.error])
    await ctx.pause(1000)
    return StepResult.ok(f"Quantity {details.quantity} entered", quantity=details.quantity)


async def click_add_content(ctx: StepContext) -> StepResult:
    button = await ctx.resolver.require("add_content", SELECTORS["add_content"], retries=3, delay_ms=1000)
    await button.click()
    await ctx.pause(2000)
    return StepResult.ok("Add Content button clicked")


async def _available_contents(ctx: StepContext) -> list:
    titles = []
    for selector in SELECTORS["content_items"]:
        for node in await ctx.driver.query_all(selector):
            title = await node.get_attribute("title")
            if title:
                titles.append(title)
    return titles


async def select_content(ctx: StepContext) -> StepResult:
    """Double-click the content tile in the Add Content dialog.

    The dialog closes itself after a successful pick and sometimes takes the
    browser context with it; a closed context here means the pick went through.
    """
    details = ctx.payload.job_details
    content = details.content if details else ""
    if not content:
        return StepResult.fail("Content type not provided")

    errors = []
    for attempt in range(1, CONTENT_SELECTION_ATTEMPTS + 1):
        ctx.logger.info(f"Selecting content '{content}' (attempt {attempt}/{CONTENT_SELECTION_ATTEMPTS})")
        try:
            if ctx.driver.is_closed():
                return StepResult.fail("Page context is closed")
            await ctx.pause(3000)

            container = await ctx.resolver.resolve(SELECTORS["content_container"])
            if container is None:
                errors.append(f"attempt {attempt}: content dialog not open")
                reopen = await ctx.resolver.resolve(SELECTORS["add_content"])
                if reopen is not None:
                    await reopen.click()
            else:
                tile = await ctx.resolver.resolve(content_selectors(content))
                if tile is not None:
                    await tile.dblclick()
                    await ctx.pause(2000)
                    return StepResult.ok(f"Content '{content}' selected", content=content, attempts=attempt)
                available = await _available_contents(ctx)
                errors.append(f"attempt {attempt}: '{content}' not listed (available: {', '.join(available) or 'none'})")
        except ContextClosedError:
            ctx.logger.info("Browser context closed during content selection, treating as selected")
            return StepResult.ok(
                f"Content '{content}' selected (context closed during selection)",
                content=content,
                attempts=attempt,
                contextClosed=True,
            )
        except Exception as e:
            ctx.logger.warning(f"Content selection attempt {attempt} failed: {e}")
            errors.append(f"attempt {attempt}: {e}")

        if attempt < CONTENT_SELECTION_ATTEMPTS:
            await ctx.pause(CONTENT_RETRY_COOLDOWN_MS)

    return StepResult.fail(
        f"Failed to select content '{content}' after {CONTENT_SELECTION_ATTEMPTS} attempts",
        errors=errors,
    )


async def click_plan(ctx: StepContext) -> StepResult:
    await ctx.pause(3000)
    button = await ctx.resolver.require("plan_button", SELECTORS["plan_button"], retries=3, delay_ms=1000)
    button_id = await button.get_attribute("id")
    await button.click()
    await ctx.pause(3000)
    return StepResult.ok(f"Click Me to plan button clicked (id: {button_id})", planButtonId=button_id)
