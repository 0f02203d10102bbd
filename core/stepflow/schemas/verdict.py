"""
Verdict Schema - The outcome of executing one action.

The verdict on an ExecutionContext is the only thing a flow driver looks at to
decide what happens next:

- RUNNING: continue with the next action
- PAUSED: suspend; resume later by re-driving the flow
- SUCCEEDED: the flow finished early (stop hook)
- FAILED: the flow failed
- STOPPED: the run was stopped from outside the engine

Each non-RUNNING verdict carries a payload (``VerdictResponse``).
"""

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field


class ExecutionVerdict(StrEnum):
    """Control-flow verdict after executing an action."""

    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    STOPPED = "STOPPED"

    @property
    def is_terminal(self) -> bool:
        return self in (ExecutionVerdict.FAILED, ExecutionVerdict.STOPPED, ExecutionVerdict.SUCCEEDED)


class FlowRunStatus(StrEnum):
    """Reason reported to the flow driver alongside a verdict."""

    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    PAUSED = "PAUSED"
    STOPPED = "STOPPED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class PauseType(StrEnum):
    DELAY = "DELAY"
    WEBHOOK = "WEBHOOK"


# ---------------------------------------------------------------------------
# Pause metadata
# ---------------------------------------------------------------------------


class DelayPauseMetadata(BaseModel):
    """Resume automatically once ``resume_date_time`` has passed."""

    type: Literal[PauseType.DELAY] = PauseType.DELAY
    resume_date_time: datetime
    handler_id: str | None = None

    model_config = {"frozen": True}


class WebhookPauseMetadata(BaseModel):
    """Resume when a request hits the resume URL built from ``request_id``."""

    type: Literal[PauseType.WEBHOOK] = PauseType.WEBHOOK
    request_id: str = ""
    response: dict[str, Any] = Field(
        default_factory=dict,
        description="Response sent back to the caller that triggered the pause",
    )

    model_config = {"frozen": True}


PauseMetadata = Annotated[
    DelayPauseMetadata | WebhookPauseMetadata,
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Hook parameters (what action code passes to run.stop / run.pause)
# ---------------------------------------------------------------------------


class StopResponse(BaseModel):
    """HTTP-like response returned to whoever started the run."""

    status: int = 200
    body: Any = None
    headers: dict[str, str] = Field(default_factory=dict)

    model_config = {"frozen": True}


class StopHookParams(BaseModel):
    response: StopResponse = Field(default_factory=StopResponse)

    model_config = {"frozen": True}


class PauseHookParams(BaseModel):
    pause_metadata: PauseMetadata

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Verdict payloads
# ---------------------------------------------------------------------------


class StopVerdictResponse(BaseModel):
    reason: Literal[FlowRunStatus.STOPPED] = FlowRunStatus.STOPPED
    stop_response: StopResponse

    model_config = {"frozen": True}


class PauseVerdictResponse(BaseModel):
    reason: Literal[FlowRunStatus.PAUSED] = FlowRunStatus.PAUSED
    pause_metadata: PauseMetadata

    model_config = {"frozen": True}


class FailedVerdictResponse(BaseModel):
    reason: Literal[FlowRunStatus.FAILED, FlowRunStatus.INTERNAL_ERROR] = FlowRunStatus.FAILED
    failed_step: str | None = None
    message: str = ""
    retryable: bool = False

    model_config = {"frozen": True}


VerdictResponse = Annotated[
    StopVerdictResponse | PauseVerdictResponse | FailedVerdictResponse,
    Field(discriminator="reason"),
]
