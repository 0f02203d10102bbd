"""
Flow Executor - walks a chain of actions.

Starting at ``action``, the executor hands each action to the executor
registered for its kind and follows ``next_action`` while the verdict stays
RUNNING. Branchable actions call back into ``execute`` for their child chains,
so nested flows need no special handling.

Example:
    executor = FlowExecutor()
    state = await executor.execute(
        action=flow.trigger_next,
        execution_state=ExecutionContext.empty(),
        constants=constants,
    )
    if state.verdict == ExecutionVerdict.PAUSED:
        # persist ``state``; re-drive later with the same context to resume
        ...
"""

import logging

from stepflow.errors import EngineError
from stepflow.flow.base_executor import BaseExecutor
from stepflow.flow.constants import EngineConstants
from stepflow.flow.context import ExecutionContext
from stepflow.flow.piece_executor import PieceExecutor
from stepflow.observability import set_trace_context
from stepflow.schemas.action import Action, ActionType
from stepflow.schemas.verdict import ExecutionVerdict

logger = logging.getLogger(__name__)


class FlowExecutor:
    """Dispatches actions to per-kind executors and drives the chain."""

    def __init__(self, executors: dict[ActionType, BaseExecutor] | None = None):
        self._executors: dict[ActionType, BaseExecutor] = {
            ActionType.PIECE: PieceExecutor(self),
        }
        if executors:
            self._executors.update(executors)

    def register_executor(self, action_type: ActionType, executor: BaseExecutor) -> None:
        self._executors[action_type] = executor

    def get_executor_for_action(self, action_type: ActionType) -> BaseExecutor:
        executor = self._executors.get(action_type)
        if executor is None:
            raise EngineError(f"No executor registered for action type '{action_type}'")
        return executor

    async def execute(
        self,
        action: Action | None,
        execution_state: ExecutionContext,
        constants: EngineConstants,
    ) -> ExecutionContext:
        set_trace_context(flow_id=constants.flow_id, flow_run_id=constants.flow_run_id)

        state = execution_state
        if state.verdict != ExecutionVerdict.RUNNING:
            logger.info(f"■ Not executing: incoming verdict is {state.verdict}")
            return state

        current = action
        while current is not None:
            executor = self.get_executor_for_action(current.type)
            state = await executor.handle(
                action=current,
                execution_state=state,
                constants=constants,
            )
            if state.verdict != ExecutionVerdict.RUNNING:
                logger.info(f"■ Halting after '{current.name}' with verdict {state.verdict}")
                break
            current = current.next_action

        return state


flow_executor = FlowExecutor()
