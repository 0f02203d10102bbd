"""
Execution Context - Immutable state of one flow run.

The context holds everything the engine knows about a run: the output of every
step executed so far, the task counter, the accumulated tags, the current
verdict and the pause request id. Every mutator returns a *new* context, so a
step that fails halfway (or an attempt the retry wrapper throws away) can never
leak partial state to the caller.

Resuming a paused run is just re-driving the whole flow with the context that
was returned when it paused: completed steps are skipped, and the paused step
sees ``is_paused`` and runs in RESUME mode.
"""

import uuid
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, Field

from stepflow.schemas.step_output import StepOutput, StepOutputStatus
from stepflow.schemas.verdict import ExecutionVerdict, VerdictResponse


def _new_pause_request_id() -> str:
    return uuid.uuid4().hex


class ExecutionContext(BaseModel):
    """
    Per-run state passed by value between steps.

    Example:
        state = ExecutionContext.empty()
        state = state.upsert_step("step_1", StepOutput.create().set_output(42)).increase_task()
        assert state.is_completed("step_1")
    """

    steps: dict[str, StepOutput] = Field(default_factory=dict)
    tasks: int = 0
    tags: tuple[str, ...] = ()
    verdict: ExecutionVerdict = ExecutionVerdict.RUNNING
    verdict_response: VerdictResponse | None = None
    pause_request_id: str = Field(default_factory=_new_pause_request_id)

    model_config = {"frozen": True}

    @classmethod
    def empty(cls) -> "ExecutionContext":
        return cls()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_step_output(self, step_name: str) -> StepOutput | None:
        return self.steps.get(step_name)

    def is_completed(self, step_name: str) -> bool:
        """True if the step has been recorded and is not waiting to resume."""
        step_output = self.steps.get(step_name)
        if step_output is None:
            return False
        return step_output.status != StepOutputStatus.PAUSED

    def is_paused(self, step_name: str) -> bool:
        step_output = self.steps.get(step_name)
        return step_output is not None and step_output.status == StepOutputStatus.PAUSED

    def current_state(self) -> dict[str, Any]:
        """Step name -> output value, the view used to resolve templated input."""
        return {name: step_output.output for name, step_output in self.steps.items()}

    @property
    def is_terminal(self) -> bool:
        return self.verdict.is_terminal

    # ------------------------------------------------------------------
    # Copy-on-write mutators
    # ------------------------------------------------------------------

    def upsert_step(self, step_name: str, step_output: StepOutput) -> "ExecutionContext":
        return self.model_copy(update={"steps": {**self.steps, step_name: step_output}})

    def add_tags(self, tags: Iterable[str]) -> "ExecutionContext":
        return self.model_copy(update={"tags": (*self.tags, *tags)})

    def increase_task(self, count: int = 1) -> "ExecutionContext":
        return self.model_copy(update={"tasks": self.tasks + count})

    def set_verdict(
        self,
        verdict: ExecutionVerdict,
        verdict_response: VerdictResponse | None = None,
    ) -> "ExecutionContext":
        return self.model_copy(update={"verdict": verdict, "verdict_response": verdict_response})

    def set_pause_request_id(self, pause_request_id: str) -> "ExecutionContext":
        return self.model_copy(update={"pause_request_id": pause_request_id})
