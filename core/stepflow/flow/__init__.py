"""Step execution: context, hooks, retry, executors and branch routing."""

from stepflow.flow.action_context import ActionContext, ExecutionType, build_resume_url
from stepflow.flow.base_executor import BaseExecutor
from stepflow.flow.branching import (
    BRANCH_STRATEGIES,
    resume_branches,
    run_branchable_piece_with_version,
)
from stepflow.flow.constants import EngineConstants
from stepflow.flow.context import ExecutionContext
from stepflow.flow.error_handling import (
    HandledError,
    continue_if_failure_handler,
    handle_execution_error,
    run_with_exponential_backoff,
)
from stepflow.flow.flow_executor import FlowExecutor, flow_executor
from stepflow.flow.hooks import ConnectionsManager, HookResponse, TagsManager
from stepflow.flow.piece_executor import PieceExecutor

__all__ = [
    # Context
    "ExecutionContext",
    "EngineConstants",
    # Executors
    "BaseExecutor",
    "FlowExecutor",
    "PieceExecutor",
    "flow_executor",
    # Action code surface
    "ActionContext",
    "ExecutionType",
    "build_resume_url",
    "HookResponse",
    "TagsManager",
    "ConnectionsManager",
    # Error handling
    "HandledError",
    "handle_execution_error",
    "run_with_exponential_backoff",
    "continue_if_failure_handler",
    # Branching
    "BRANCH_STRATEGIES",
    "resume_branches",
    "run_branchable_piece_with_version",
]
