"""
Error handling for step execution.

- handle_execution_error: classify any exception raised during a step
- run_with_exponential_backoff: re-run a failed step while the failure is
  retryable and the action allows it
- continue_if_failure_handler: let the flow go on past a failed step when the
  action is configured to
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from stepflow.errors import EngineError, ExecutionError
from stepflow.flow.constants import EngineConstants
from stepflow.flow.context import ExecutionContext
from stepflow.schemas.action import Action
from stepflow.schemas.verdict import ExecutionVerdict, FailedVerdictResponse, FlowRunStatus

logger = logging.getLogger(__name__)

ActionHandler = Callable[..., Awaitable[ExecutionContext]]

_TRANSIENT_ERRORS = (httpx.TransportError, ConnectionError, TimeoutError)


@dataclass(frozen=True)
class HandledError:
    message: str
    retryable: bool
    reason: FlowRunStatus = FlowRunStatus.FAILED

    def verdict_response(self, step_name: str) -> FailedVerdictResponse:
        return FailedVerdictResponse(
            reason=self.reason,
            failed_step=step_name,
            message=self.message,
            retryable=self.retryable,
        )


def handle_execution_error(error: BaseException) -> HandledError:
    """Classify an error raised while executing a step."""
    message = str(error) or type(error).__name__

    if isinstance(error, EngineError):
        return HandledError(message=message, retryable=False, reason=FlowRunStatus.INTERNAL_ERROR)
    if isinstance(error, ExecutionError):
        return HandledError(message=message, retryable=error.retryable)
    if isinstance(error, _TRANSIENT_ERRORS):
        return HandledError(message=message, retryable=True)
    # Anything else escaped the action's own run logic
    return HandledError(message=message, retryable=True)


def _failed_here(execution_state: ExecutionContext, action: Action) -> FailedVerdictResponse | None:
    if execution_state.verdict != ExecutionVerdict.FAILED:
        return None
    response = execution_state.verdict_response
    if not isinstance(response, FailedVerdictResponse) or response.failed_step != action.name:
        return None
    return response


def _should_retry(
    execution_state: ExecutionContext,
    action: Action,
    constants: EngineConstants,
    attempt: int,
) -> bool:
    failure = _failed_here(execution_state, action)
    if failure is None or not failure.retryable:
        return False
    if not action.settings.error_handling_options.retry_on_failure:
        return False
    if constants.resume_payload is not None:
        return False
    return attempt < constants.retry.max_attempts


async def run_with_exponential_backoff(
    execution_state: ExecutionContext,
    action: Action,
    constants: EngineConstants,
    request_function: ActionHandler,
) -> ExecutionContext:
    """
    Run ``request_function`` with bounded exponential backoff.

    Every attempt starts from the same incoming ``execution_state``; the
    result of a failed attempt is dropped when another attempt follows.
    """
    attempt = 1
    while True:
        result = await request_function(
            action=action,
            execution_state=execution_state,
            constants=constants,
        )
        if not _should_retry(result, action, constants, attempt):
            return result

        delay = constants.retry.delay_for(attempt)
        logger.info(f"   Using backoff: Sleeping {delay}s before retry...", extra={"attempt": attempt})
        await asyncio.sleep(delay)
        attempt += 1
        logger.info(f"   ↻ Retrying ({attempt}/{constants.retry.max_attempts})...")


def continue_if_failure_handler(
    execution_state: ExecutionContext,
    action: Action,
    constants: EngineConstants,
) -> ExecutionContext:
    """Turn a FAILED verdict back into RUNNING when the action allows it."""
    if (
        _failed_here(execution_state, action) is not None
        and action.settings.error_handling_options.continue_on_failure
        and not constants.test_single_step_mode
    ):
        logger.info(f"   → Continuing past failed step '{action.name}'")
        return execution_state.set_verdict(ExecutionVerdict.RUNNING, None).increase_task()
    return execution_state
