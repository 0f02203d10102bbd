"""
stepflow - step execution core for flow automation.

Executes one action of a flow at a time, interprets what the action asked for
(stop, pause, branch) and returns a new immutable ExecutionContext whose
verdict tells the driver what to do next.
"""

from stepflow.flow import (
    ActionContext,
    EngineConstants,
    ExecutionContext,
    FlowExecutor,
    PieceExecutor,
    flow_executor,
)
from stepflow.pieces import ActionDefinition, BranchOutput, Piece, PieceLoader, Property
from stepflow.schemas import (
    Action,
    ExecutionVerdict,
    FlowRunStatus,
    PieceActionSettings,
    StepOutput,
    StepOutputStatus,
)

__all__ = [
    "Action",
    "ActionContext",
    "ActionDefinition",
    "BranchOutput",
    "EngineConstants",
    "ExecutionContext",
    "ExecutionVerdict",
    "FlowExecutor",
    "FlowRunStatus",
    "Piece",
    "PieceActionSettings",
    "PieceExecutor",
    "PieceLoader",
    "Property",
    "StepOutput",
    "StepOutputStatus",
    "flow_executor",
]
