from estimation_rpa.automation.selectors import SELECTORS
from estimation_rpa.models.state import StepResult
from estimation_rpa.workflow.steps.context import StepContext


async def company_login(ctx: StepContext) -> StepResult:
    login = ctx.payload.company_login
    if login is None or not login.company_name:
        return StepResult.fail("Company login details not provided")

    name_field = await ctx.resolver.require("company_name", SELECTORS["company_name"])
    password_field = await ctx.resolver.require("company_password", SELECTORS["company_password"])
    button = await ctx.resolver.require("company_login_button", SELECTORS["company_login_button"])

    await name_field.fill(login.company_name)
    await password_field.fill(login.password)
    await button.click()
    await ctx.pause(3000)
    ctx.logger.info(f"Company login submitted for {login.company_name}")
    return StepResult.ok("Company login successful", currentUrl=ctx.driver.url)


async def user_login(ctx: StepContext) -> StepResult:
    """Pick the financial year, then sign in as the user."""
    login = ctx.payload.user_login
    if login is None or not login.username:
        return StepResult.fail("User login details not provided")

    year = await ctx.resolver.require("financial_year", SELECTORS["financial_year"])
    await year.select_option(ctx.settings.FINANCIAL_YEAR)
    await ctx.pause(1000)

    username_field = await ctx.resolver.require("username", SELECTORS["username"])
    password_field = await ctx.resolver.require("user_password", SELECTORS["user_password"])
    button = await ctx.resolver.require("user_login_button", SELECTORS["user_login_button"])

    await username_field.fill(login.username)
    await password_field.fill(login.password)
    await button.click()
    await ctx.pause(3000)
    return StepResult.ok(
        "User login successful",
        currentUrl=ctx.driver.url,
        financialYear=ctx.settings.FINANCIAL_YEAR,
    )
