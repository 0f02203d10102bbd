"""Schemas for flows, recorded steps and verdicts."""

from stepflow.schemas.action import (
    Action,
    ActionType,
    BranchChild,
    ErrorHandlingOptions,
    PieceActionSettings,
)
from stepflow.schemas.step_output import StepOutput, StepOutputStatus
from stepflow.schemas.verdict import (
    DelayPauseMetadata,
    ExecutionVerdict,
    FailedVerdictResponse,
    FlowRunStatus,
    PauseHookParams,
    PauseMetadata,
    PauseType,
    PauseVerdictResponse,
    StopHookParams,
    StopResponse,
    StopVerdictResponse,
    VerdictResponse,
    WebhookPauseMetadata,
)

__all__ = [
    # Action
    "Action",
    "ActionType",
    "BranchChild",
    "ErrorHandlingOptions",
    "PieceActionSettings",
    # Step output
    "StepOutput",
    "StepOutputStatus",
    # Verdict
    "ExecutionVerdict",
    "FlowRunStatus",
    "PauseType",
    "DelayPauseMetadata",
    "WebhookPauseMetadata",
    "PauseMetadata",
    "StopResponse",
    "StopHookParams",
    "PauseHookParams",
    "StopVerdictResponse",
    "PauseVerdictResponse",
    "FailedVerdictResponse",
    "VerdictResponse",
]
