from typing import Any, Dict, Sequence

from langgraph.graph import END, StateGraph

from estimation_rpa.models.state import GraphState, RunPhase
from estimation_rpa.workflow.steps import StepContext, StepDefinition, capture_screenshot, execute_step

FINAL_CAPTURE = "final_capture"


def node_name(step: StepDefinition) -> str:
    return f"step_{step.number:02d}"


def initial_state() -> GraphState:
    return GraphState(
        phase=RunPhase.NOT_STARTED,
        steps=[],
        context={},
        errors=[],
        message="",
    )


def _step_node(step: StepDefinition, ctx: StepContext, settle_ms: int):
    async def run_step(state: GraphState) -> Dict[str, Any]:
        record = step.new_record()
        result = await execute_step(step, ctx)
        record.record(result)
        update = {
            "steps": [*state["steps"], record],
            "errors": [*state["errors"], *result.errors],
        }
        if not result.success:
            update.update(
                phase=RunPhase.FAILED,
                message=f"Workflow failed at step {step.number} ({step.description}): {result.message}",
                errors=update["errors"] or [result.message],
            )
            return update

        ctx.data.update(result.data)
        update.update(
            phase=RunPhase.RUNNING,
            context={**state["context"], **result.data},
        )
        if settle_ms > 0:
            await ctx.pause(settle_ms)
        return update

    return run_step


def _final_capture_node(ctx: StepContext):
    async def final_capture(state: GraphState) -> Dict[str, Any]:
        context = dict(state["context"])
        try:
            context.update(await capture_screenshot(ctx))
        except Exception as e:
            ctx.logger.warning(f"Final screenshot failed: {e}")
        return {
            "phase": RunPhase.SUCCEEDED,
            "context": context,
            "message": f"Workflow completed successfully ({len(state['steps'])} steps)",
        }

    return final_capture


def _route(next_node: str):
    return lambda state: END if state["phase"] == RunPhase.FAILED else next_node


def create_workflow(steps: Sequence[StepDefinition], ctx: StepContext, settle_ms: int = 0):
    """Compile a graph that runs `steps` in order and stops at the first failure."""
    if not steps:
        raise ValueError("A workflow needs at least one step")
    workflow = StateGraph(GraphState)

    names = [node_name(step) for step in steps]
    for step, name in zip(steps, names):
        workflow.add_node(name, _step_node(step, ctx, settle_ms))
    workflow.add_node(FINAL_CAPTURE, _final_capture_node(ctx))

    workflow.set_entry_point(names[0])
    for name, next_node in zip(names, [*names[1:], FINAL_CAPTURE]):
        workflow.add_conditional_edges(
            name,
            _route(next_node),
            {next_node: next_node, END: END},
        )
    workflow.add_edge(FINAL_CAPTURE, END)

    return workflow.compile()
