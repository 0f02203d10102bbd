"""
Branch Router - runs the children selected by a branchable action's output.

A branchable action returns a BranchOutput: an ordered map of output key ->
value plus the version of the algorithm that interprets it. Each version is a
strategy in BRANCH_STRATEGIES:

- v1: every active key with a declared child runs, in map order, each child
  chain seeing the context left by the previous one. The value of the last
  branch that ran becomes the step's output.
- v2: exclusive; only the first active key with a declared child runs.

A child chain that ends PAUSED records the branching step as PAUSED together
with its BranchOutput. Re-driving the flow replays the branch loop from that
record instead of calling the action again, so the same branches are taken
and completed children are skipped. Any other non-RUNNING verdict from a child
stops iteration and is kept on the result.
"""

import dataclasses
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from stepflow.errors import EngineError
from stepflow.flow.constants import EngineConstants
from stepflow.flow.context import ExecutionContext
from stepflow.pieces.piece import BranchOutput
from stepflow.schemas.action import Action
from stepflow.schemas.step_output import StepOutput, StepOutputStatus
from stepflow.schemas.verdict import ExecutionVerdict

if TYPE_CHECKING:
    from stepflow.flow.flow_executor import FlowExecutor

logger = logging.getLogger(__name__)

DEFAULT_BRANCH_VERSION = "v1"


def is_active_branch(value: Any) -> bool:
    """False, None and empty values leave a branch inactive."""
    if value is None or value is False:
        return False
    if isinstance(value, str | list | dict | tuple) and len(value) == 0:
        return False
    return True


async def _execute_branches(
    *,
    branch_output: BranchOutput,
    execution_state: ExecutionContext,
    action: Action,
    constants: EngineConstants,
    step_output: StepOutput,
    flow_executor: "FlowExecutor",
    exclusive: bool,
) -> ExecutionContext:
    state = execution_state
    output_value = None

    for key, value in branch_output.output.items():
        if not is_active_branch(value):
            continue
        child = action.get_child(key)
        if child is None:
            logger.debug(f"   Branch '{key}' of '{action.name}' has no child, skipping")
            continue

        logger.info(f"   ⑂ Branch '{key}' → {child.name}")
        state = await flow_executor.execute(action=child, execution_state=state, constants=constants)
        output_value = value

        if state.verdict != ExecutionVerdict.RUNNING or exclusive:
            break

    if state.verdict == ExecutionVerdict.PAUSED:
        paused_output = step_output.set_status(StepOutputStatus.PAUSED).set_branch_output(
            dataclasses.asdict(branch_output)
        )
        return state.upsert_step(action.name, paused_output)

    return state.upsert_step(action.name, step_output.set_output(output_value)).increase_task()


async def _run_all_active(**kwargs: Any) -> ExecutionContext:
    return await _execute_branches(exclusive=False, **kwargs)


async def _run_first_active(**kwargs: Any) -> ExecutionContext:
    return await _execute_branches(exclusive=True, **kwargs)


BranchStrategy = Callable[..., Awaitable[ExecutionContext]]

BRANCH_STRATEGIES: dict[str, BranchStrategy] = {
    "v1": _run_all_active,
    "v2": _run_first_active,
}


async def run_branchable_piece_with_version(
    branch_output: BranchOutput,
    execution_state: ExecutionContext,
    action: Action,
    constants: EngineConstants,
    step_output: StepOutput,
    flow_executor: "FlowExecutor",
) -> ExecutionContext:
    version = branch_output.version or DEFAULT_BRANCH_VERSION
    strategy = BRANCH_STRATEGIES.get(version)
    if strategy is None:
        raise EngineError(f"Unsupported branch output version '{version}' for step '{action.name}'")

    return await strategy(
        branch_output=branch_output,
        execution_state=execution_state,
        action=action,
        constants=constants,
        step_output=step_output,
        flow_executor=flow_executor,
    )


async def resume_branches(
    execution_state: ExecutionContext,
    action: Action,
    constants: EngineConstants,
    flow_executor: "FlowExecutor",
) -> ExecutionContext | None:
    """Replay the branch loop of a router paused on one of its children.

    Returns None when the step holds no recorded branch selection.
    """
    previous = execution_state.get_step_output(action.name)
    if previous is None or previous.status != StepOutputStatus.PAUSED:
        return None
    branch_output = BranchOutput.coerce(previous.branch_output)
    if branch_output is None:
        return None

    logger.info(f"   ⑂ Replaying branches of '{action.name}'")
    step_output = previous.set_status(StepOutputStatus.SUCCEEDED).set_branch_output(None)
    return await run_branchable_piece_with_version(
        branch_output=branch_output,
        execution_state=execution_state,
        action=action,
        constants=constants,
        step_output=step_output,
        flow_executor=flow_executor,
    )
