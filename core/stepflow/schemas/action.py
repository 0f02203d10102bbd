"""
Action Schema - One node of a flow.

An action points at a piece action (piece name, version, action name), carries
the templated input for it, and is linked to the rest of the flow through
``next_action`` (the following sibling) and ``children`` (branch targets,
keyed by the output name that activates them).

Examples:
    Action(
        name="step_1",
        settings=PieceActionSettings(
            piece_name="gmail",
            piece_version="0.3.0",
            action_name="send_email",
            input={"to": "{{trigger.email}}"},
            error_handling_options=ErrorHandlingOptions(retry_on_failure=True),
        ),
    )
"""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ActionType(StrEnum):
    """Kinds of actions an executor can be registered for."""

    PIECE = "PIECE"


class ErrorHandlingOptions(BaseModel):
    """Per-action failure policy."""

    continue_on_failure: bool = Field(
        default=False,
        description="Keep the flow RUNNING after this step fails (the failure stays recorded)",
    )
    retry_on_failure: bool = Field(
        default=False,
        description="Retry retryable failures with exponential backoff",
    )

    model_config = {"frozen": True}


class PieceActionSettings(BaseModel):
    """Settings of a PIECE action."""

    piece_name: str
    piece_version: str
    action_name: str | None = None
    input: dict[str, Any] = Field(default_factory=dict)
    error_handling_options: ErrorHandlingOptions = Field(default_factory=ErrorHandlingOptions)

    model_config = {"frozen": True}


class BranchChild(BaseModel):
    """A child action wired to the output key ``name`` of its parent."""

    name: str
    action: "Action"

    model_config = {"frozen": True}


class Action(BaseModel):
    """A flow node, consumed read-only by the executors."""

    name: str
    type: ActionType = ActionType.PIECE
    display_name: str = ""
    settings: PieceActionSettings
    children: list[BranchChild] | None = None
    next_action: "Action | None" = None

    model_config = {"frozen": True}

    def get_child(self, name: str) -> "Action | None":
        """Return the child wired to output key ``name``, if one is declared."""
        for child in self.children or []:
            if child.name == name:
                return child.action
        return None


BranchChild.model_rebuild()
Action.model_rebuild()
