"""
Tests for FlowExecutor: chain walking, halting, re-driving and dispatch.
"""

import pytest

from helpers import make_action, make_constants, make_piece
from stepflow.errors import EngineError
from stepflow.flow import ExecutionContext, ExecutionType, FlowExecutor
from stepflow.pieces import ActionDefinition
from stepflow.schemas import (
    ActionType,
    ExecutionVerdict,
    PauseVerdictResponse,
    StepOutput,
    StopVerdictResponse,
    WebhookPauseMetadata,
)


class Counter:
    def __init__(self, result=None):
        self.calls = 0
        self.result = result

    async def __call__(self, ctx):
        self.calls += 1
        return self.result


def chain(*actions):
    """Link actions through next_action, last one first."""
    current = None
    for action in reversed(actions):
        current = action.model_copy(update={"next_action": current})
    return current


@pytest.mark.asyncio
async def test_runs_chain_in_order_and_exposes_previous_outputs():
    async def first(ctx):
        return {"greeting": "hello"}

    async def second(ctx):
        return ctx.props_value["message"].upper()

    constants = make_constants(
        make_piece(
            ActionDefinition(name="first", run=first),
            ActionDefinition(name="second", run=second),
        )
    )
    action = chain(
        make_action("step_1", "first"),
        make_action("step_2", "second", input={"message": "{{step_1.greeting}} world"}),
    )

    result = await FlowExecutor().execute(action, ExecutionContext.empty(), constants)

    assert result.verdict == ExecutionVerdict.RUNNING
    assert result.get_step_output("step_2").output == "HELLO WORLD"
    assert result.get_step_output("step_2").input == {"message": "hello world"}
    assert result.tasks == 2


@pytest.mark.asyncio
async def test_stop_halts_the_chain():
    async def stopper(ctx):
        ctx.run.stop({"response": {"status": 201, "body": {"ok": True}}})
        return "stopped"

    after = Counter()
    constants = make_constants(
        make_piece(
            ActionDefinition(name="stopper", run=stopper),
            ActionDefinition(name="after", run=after),
        )
    )
    action = chain(make_action("step_1", "stopper"), make_action("step_2", "after"))

    result = await FlowExecutor().execute(action, ExecutionContext.empty(), constants)

    assert after.calls == 0
    assert result.verdict == ExecutionVerdict.SUCCEEDED
    assert isinstance(result.verdict_response, StopVerdictResponse)
    assert result.verdict_response.stop_response.status == 201
    assert result.verdict_response.stop_response.body == {"ok": True}
    assert result.get_step_output("step_2") is None


@pytest.mark.asyncio
async def test_failure_halts_the_chain():
    async def explode(ctx):
        raise ValueError("nope")

    after = Counter()
    constants = make_constants(
        make_piece(
            ActionDefinition(name="explode", run=explode),
            ActionDefinition(name="after", run=after),
        )
    )
    action = chain(make_action("step_1", "explode"), make_action("step_2", "after"))

    result = await FlowExecutor().execute(action, ExecutionContext.empty(), constants)

    assert after.calls == 0
    assert result.verdict == ExecutionVerdict.FAILED
    assert result.verdict_response.failed_step == "step_1"
    assert result.verdict_response.message == "nope"


@pytest.mark.asyncio
async def test_paused_flow_resumes_without_rerunning_completed_steps():
    before = Counter(result="before")
    after = Counter(result="after")
    resumes = []

    async def wait_for_approval(ctx):
        if ctx.execution_type == ExecutionType.RESUME:
            resumes.append(ctx.resume_payload)
            return ctx.resume_payload["body"]
        ctx.run.pause({"pause_metadata": {"type": "WEBHOOK", "response": {"accepted": True}}})
        return None

    piece = make_piece(
        ActionDefinition(name="before", run=before),
        ActionDefinition(name="approval", run=wait_for_approval),
        ActionDefinition(name="after", run=after),
    )
    action = chain(
        make_action("step_1", "before"),
        make_action("step_2", "approval"),
        make_action("step_3", "after"),
    )
    executor = FlowExecutor()

    paused = await executor.execute(action, ExecutionContext.empty(), make_constants(piece))

    assert paused.verdict == ExecutionVerdict.PAUSED
    assert isinstance(paused.verdict_response, PauseVerdictResponse)
    metadata = paused.verdict_response.pause_metadata
    assert isinstance(metadata, WebhookPauseMetadata)
    assert metadata.request_id == paused.pause_request_id
    assert metadata.response == {"accepted": True}
    assert after.calls == 0

    resumed = await executor.execute(
        action,
        paused.set_verdict(ExecutionVerdict.RUNNING),
        make_constants(piece, resume_payload={"body": {"approved": True}}),
    )

    assert before.calls == 1
    assert after.calls == 1
    assert resumes == [{"body": {"approved": True}}]
    assert resumed.verdict == ExecutionVerdict.RUNNING
    assert resumed.get_step_output("step_2").output == {"approved": True}
    assert resumed.tasks == 3


@pytest.mark.asyncio
async def test_empty_chain_returns_state_unchanged():
    state = ExecutionContext.empty().upsert_step("trigger", StepOutput.create().set_output(1))

    result = await FlowExecutor().execute(None, state, make_constants())

    assert result is state


@pytest.mark.asyncio
async def test_custom_executor_can_replace_piece_handling():
    seen = []

    class RecordingExecutor:
        async def handle(self, action, execution_state, constants):
            seen.append(action.name)
            return execution_state.increase_task()

    executor = FlowExecutor(executors={ActionType.PIECE: RecordingExecutor()})
    action = chain(make_action("step_1", "anything"), make_action("step_2", "anything"))

    result = await executor.execute(action, ExecutionContext.empty(), make_constants())

    assert seen == ["step_1", "step_2"]
    assert result.tasks == 2


def test_register_executor_overrides_default():
    class NoopExecutor:
        async def handle(self, action, execution_state, constants):
            return execution_state

    executor = FlowExecutor()
    noop = NoopExecutor()
    executor.register_executor(ActionType.PIECE, noop)

    assert executor.get_executor_for_action(ActionType.PIECE) is noop


def test_unknown_action_type_raises():
    executor = FlowExecutor()

    with pytest.raises(EngineError, match="No executor registered"):
        executor.get_executor_for_action("CODE")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "verdict",
    [ExecutionVerdict.FAILED, ExecutionVerdict.STOPPED, ExecutionVerdict.SUCCEEDED, ExecutionVerdict.PAUSED],
)
async def test_no_action_runs_unless_incoming_verdict_is_running(verdict):
    first = Counter(result="first")
    constants = make_constants(make_piece(ActionDefinition(name="first", run=first)))
    state = ExecutionContext.empty().set_verdict(verdict)

    result = await FlowExecutor().execute(make_action("step_1", "first"), state, constants)

    assert first.calls == 0
    assert result is state
    assert result.verdict == verdict
