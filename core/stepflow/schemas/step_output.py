"""
StepOutput Schema - What a single step recorded.

A StepOutput is created when an action starts executing and only its own
executor derives new versions of it. Later steps read it (through variable
resolution) but never change it.
"""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from stepflow.schemas.action import ActionType


class StepOutputStatus(StrEnum):
    """Status of a recorded step."""

    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    PAUSED = "PAUSED"


class StepOutput(BaseModel):
    """Immutable record of one step: censored input, status, output and error."""

    type: ActionType = ActionType.PIECE
    status: StepOutputStatus = StepOutputStatus.SUCCEEDED
    input: dict[str, Any] = Field(default_factory=dict)
    output: Any = None
    error_message: str | None = None
    # Branch selection of a router whose child paused; replayed on resume
    branch_output: dict[str, Any] | None = None

    model_config = {"frozen": True}

    @classmethod
    def create(
        cls,
        input: dict[str, Any] | None = None,
        type: ActionType = ActionType.PIECE,
        status: StepOutputStatus = StepOutputStatus.SUCCEEDED,
    ) -> "StepOutput":
        return cls(type=type, status=status, input=input or {})

    def set_input(self, input: dict[str, Any]) -> "StepOutput":
        return self.model_copy(update={"input": input})

    def set_output(self, output: Any) -> "StepOutput":
        return self.model_copy(update={"output": output})

    def set_status(self, status: StepOutputStatus) -> "StepOutput":
        return self.model_copy(update={"status": status})

    def set_error_message(self, error_message: str | None) -> "StepOutput":
        return self.model_copy(update={"error_message": error_message})

    def set_branch_output(self, branch_output: dict[str, Any] | None) -> "StepOutput":
        return self.model_copy(update={"branch_output": branch_output})
