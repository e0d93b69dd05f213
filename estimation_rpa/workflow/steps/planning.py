from estimation_rpa.automation import selectors
from estimation_rpa.automation.forms import SegmentReport
from estimation_rpa.models.state import StepResult
from estimation_rpa.workflow.steps.context import StepContext


def size_summary(size) -> str:
    return (
        f"H:{size.height}mm, L:{size.length}mm, W:{size.width}mm, "
        f"OF:{size.o_flap}mm, PF:{size.p_flap}mm"
    )


async def _visible(ctx: StepContext, spec) -> bool:
    node = await ctx.resolver.resolve(spec.selectors)
    return node is not None and await node.is_visible()


async def fill_size(ctx: StepContext) -> StepResult:
    size = ctx.payload.job_size
    if size is None:
        return StepResult.fail("Job size not provided")

    await ctx.resolver.optional("planning_sheet", selectors.SELECTORS["planning_sheet"], retries=5, delay_ms=1000)

    report = SegmentReport("job_size")
    for name, spec in selectors.SIZE_FIELDS.items():
        report.add(await ctx.forms.fill(spec, getattr(size, name)))

    # Folded dimensions only appear for some content types
    if await _visible(ctx, selectors.FOLDED_FIELDS["folded_h"]):
        report.add(await ctx.forms.fill(selectors.FOLDED_FIELDS["folded_h"], size.height))
        report.add(await ctx.forms.fill(selectors.FOLDED_FIELDS["folded_l"], size.length))
    for spec in selectors.SEAL_FIELDS.values():
        if await _visible(ctx, spec):
            report.add(await ctx.forms.fill(spec, selectors.SEAL_DEFAULT))

    report.add(await ctx.forms.fill(selectors.SIZE_SUMMARY, size_summary(size)))

    if not report.success:
        return StepResult.fail(
            f"Job size segment incomplete: {'; '.join(report.required_errors)}",
            errors=report.errors,
            **report.as_data(),
        )
    ctx.logger.info(f"Job size filled: {report.filled}")
    return StepResult.ok(f"Filled {len(report.filled)} job size fields", **report.as_data())


async def _fill_margins(ctx: StepContext, report: SegmentReport, specs, margins) -> None:
    for spec, value in zip(specs, margins):
        report.add(await ctx.forms.fill(spec, value))


async def fill_details(ctx: StepContext) -> StepResult:
    """Fill material, printing and wastage/finishing segments of the planning sheet."""
    payload = ctx.payload
    report = SegmentReport("job_details")

    sections = (
        (payload.material, selectors.MATERIAL_FIELDS),
        (payload.printing_details, selectors.PRINTING_FIELDS),
        (payload.wastage_finishing, selectors.WASTAGE_FIELDS),
    )
    for section, fields in sections:
        if section is None:
            continue
        for name, spec in fields.items():
            report.add(await ctx.forms.fill(spec, getattr(section, name)))

    wastage = payload.wastage_finishing
    if wastage is not None:
        await _fill_margins(ctx, report, selectors.TRIMMING_FIELDS, wastage.trimming)
        await _fill_margins(ctx, report, selectors.STRIPING_FIELDS, wastage.striping)

    for fallback in report.fallbacks:
        ctx.logger.warning(f"Dropdown fallback used: {fallback}")
    if not report.success:
        return StepResult.fail(
            f"Job details incomplete: {'; '.join(report.required_errors)}",
            errors=report.errors,
            **report.as_data(),
        )
    return StepResult.ok(f"Filled {len(report.filled)} job detail fields", **report.as_data())
