"""
Piece Executor - runs a PIECE action.

The executor:
1. Skips the step if the incoming verdict is terminal or the step is already
   completed
2. Replays the recorded branches of a router paused on a child, or
   resolves the piece action and its templated input
3. Runs processors/validators over the input
4. Calls the action's run (or test) with a fresh ActionContext
5. Folds the captured hooks into a new ExecutionContext:
   stop → SUCCEEDED, pause → PAUSED, branches → Branch Router, else RUNNING
6. Converts any error into a FAILED step; nothing is re-raised

Steps 2-6 are one attempt, wrapped by run_with_exponential_backoff.
"""

import inspect
import logging
from typing import TYPE_CHECKING

from stepflow.errors import EngineError, ValidationError
from stepflow.flow.action_context import (
    ActionContext,
    ExecutionType,
    ProjectContext,
    RunContext,
    ServerContext,
)
from stepflow.flow.branching import resume_branches, run_branchable_piece_with_version
from stepflow.flow.constants import EngineConstants
from stepflow.flow.context import ExecutionContext
from stepflow.flow.error_handling import (
    continue_if_failure_handler,
    handle_execution_error,
    run_with_exponential_backoff,
)
from stepflow.flow.hooks import (
    ConnectionsManager,
    HookResponse,
    TagsManager,
    create_pause_hook,
    create_stop_hook,
)
from stepflow.observability import set_trace_context
from stepflow.pieces.piece import AUTHENTICATION_PROPERTY_NAME, BranchOutput
from stepflow.schemas.action import Action, ActionType
from stepflow.schemas.step_output import StepOutput, StepOutputStatus
from stepflow.schemas.verdict import (
    ExecutionVerdict,
    PauseVerdictResponse,
    StopVerdictResponse,
)
from stepflow.services.connections import create_connection_service
from stepflow.services.files import create_files_service
from stepflow.services.storage import create_context_store

if TYPE_CHECKING:
    from stepflow.flow.flow_executor import FlowExecutor

logger = logging.getLogger(__name__)


class PieceExecutor:
    """
    Executes PIECE actions.

    Needs the owning FlowExecutor to run the child chains of branchable
    actions.
    """

    def __init__(self, flow_executor: "FlowExecutor"):
        self._flow_executor = flow_executor

    async def handle(
        self,
        action: Action,
        execution_state: ExecutionContext,
        constants: EngineConstants,
    ) -> ExecutionContext:
        if execution_state.is_terminal:
            logger.info(f"   ⊘ Verdict is {execution_state.verdict}, not running '{action.name}'")
            return execution_state
        if execution_state.is_completed(action.name):
            logger.info(f"   ⊘ Step '{action.name}' already completed, skipping")
            return execution_state

        set_trace_context(step_name=action.name)
        settings = action.settings
        logger.info(
            f"▶ Step: {action.name} ({settings.piece_name}@{settings.piece_version}"
            f" → {settings.action_name})"
        )

        result = await run_with_exponential_backoff(
            execution_state, action, constants, self._execute_action
        )
        result = continue_if_failure_handler(result, action, constants)

        set_trace_context(step_name=action.name)
        if result.verdict == ExecutionVerdict.FAILED:
            step_output = result.get_step_output(action.name)
            error = step_output.error_message if step_output else None
            logger.error(f"   ✗ Failed: {error}", extra={"verdict": result.verdict})
        elif result.verdict == ExecutionVerdict.PAUSED:
            logger.info("   ⏸ Paused", extra={"verdict": result.verdict})
        else:
            logger.info(f"   ✓ {result.verdict} (tasks: {result.tasks})", extra={"verdict": result.verdict})
        return result

    async def _execute_action(
        self,
        action: Action,
        execution_state: ExecutionContext,
        constants: EngineConstants,
    ) -> ExecutionContext:
        step_output = StepOutput.create(type=ActionType.PIECE, status=StepOutputStatus.SUCCEEDED)

        try:
            replayed = await resume_branches(
                execution_state, action, constants, self._flow_executor
            )
            if replayed is not None:
                return replayed

            settings = action.settings
            if not settings.action_name:
                raise EngineError(f"Step '{action.name}' has no action name")

            piece, piece_action = constants.piece_loader.get_piece_and_action(
                piece_name=settings.piece_name,
                piece_version=settings.piece_version,
                action_name=settings.action_name,
            )

            resolved_input, censored_input = await constants.variable_service.resolve(
                unresolved_input=settings.input,
                execution_state=execution_state,
            )
            step_output = step_output.set_input(censored_input)

            processed_input, errors = await constants.variable_service.apply_processors_and_validators(
                resolved_input, piece_action.props, piece.auth
            )
            if errors:
                raise ValidationError(errors)

            hook_response = HookResponse()
            is_paused = execution_state.is_paused(action.name)
            context = ActionContext(
                execution_type=ExecutionType.RESUME if is_paused else ExecutionType.BEGIN,
                resume_payload=constants.resume_payload,
                store=create_context_store(
                    api_url=constants.api_url,
                    worker_token=constants.worker_token,
                    flow_id=constants.flow_id,
                    transport=constants.transport,
                ),
                auth=processed_input.get(AUTHENTICATION_PROPERTY_NAME),
                files=create_files_service(
                    api_url=constants.api_url,
                    worker_token=constants.worker_token,
                    flow_id=constants.flow_id,
                    step_name=action.name,
                    type=constants.files_service_type,
                    transport=constants.transport,
                ),
                server=ServerContext(
                    token=constants.worker_token,
                    api_url=constants.api_url,
                    public_url=constants.server_url,
                ),
                props_value=processed_input,
                tags=TagsManager(hook_response),
                connections=ConnectionsManager(
                    create_connection_service(
                        api_url=constants.api_url,
                        worker_token=constants.worker_token,
                        project_id=constants.project_id,
                        transport=constants.transport,
                    ),
                    hook_response,
                ),
                server_url=constants.server_url,
                run=RunContext(
                    id=constants.flow_run_id,
                    stop=create_stop_hook(hook_response),
                    pause=create_pause_hook(hook_response, execution_state.pause_request_id),
                ),
                project=ProjectContext(
                    id=constants.project_id,
                    external_id=constants.external_project_id,
                ),
                pause_request_id=execution_state.pause_request_id,
            )

            if constants.test_single_step_mode and piece_action.test is not None:
                run_method = piece_action.test
            else:
                run_method = piece_action.run

            output = run_method(context)
            if inspect.isawaitable(output):
                output = await output

            new_execution_state = execution_state.add_tags(hook_response.tags)

            if hook_response.stopped:
                if hook_response.stop_response is None:
                    raise EngineError("Stop hook fired without a response")
                return (
                    new_execution_state.upsert_step(action.name, step_output.set_output(output))
                    .set_verdict(
                        ExecutionVerdict.SUCCEEDED,
                        StopVerdictResponse(stop_response=hook_response.stop_response.response),
                    )
                    .increase_task()
                )

            if hook_response.paused:
                if hook_response.pause_response is None:
                    raise EngineError("Pause hook fired without metadata")
                paused_output = step_output.set_output(output).set_status(StepOutputStatus.PAUSED)
                return new_execution_state.upsert_step(action.name, paused_output).set_verdict(
                    ExecutionVerdict.PAUSED,
                    PauseVerdictResponse(pause_metadata=hook_response.pause_response.pause_metadata),
                )

            if action.children and piece_action.has_branches:
                branch_output = BranchOutput.coerce(output)
                if branch_output is not None:
                    return await run_branchable_piece_with_version(
                        branch_output=branch_output,
                        execution_state=new_execution_state,
                        action=action,
                        constants=constants,
                        step_output=step_output,
                        flow_executor=self._flow_executor,
                    )

            return (
                new_execution_state.upsert_step(action.name, step_output.set_output(output))
                .increase_task()
                .set_verdict(ExecutionVerdict.RUNNING, None)
            )
        except Exception as e:
            handled_error = handle_execution_error(e)
            logger.warning(
                f"   ✗ Attempt failed for '{action.name}': {handled_error.message}"
                f" (retryable={handled_error.retryable})"
            )

            failed_step_output = step_output.set_status(StepOutputStatus.FAILED).set_error_message(
                handled_error.message
            )
            return execution_state.upsert_step(action.name, failed_step_output).set_verdict(
                ExecutionVerdict.FAILED,
                handled_error.verdict_response(action.name),
            )
