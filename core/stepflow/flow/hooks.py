"""
Side-effect capture for one action attempt.

Action code never touches the ExecutionContext. Instead it receives handles
(stop, pause, tags, connections) that write into a HookResponse. Once the run
returns, the piece executor folds the HookResponse into a new context.

A HookResponse belongs to exactly one attempt: the retry wrapper re-runs the
whole attempt, which builds a fresh one, so tags from a discarded attempt
never reach the context.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from stepflow.schemas.verdict import (
    DelayPauseMetadata,
    PauseHookParams,
    StopHookParams,
    WebhookPauseMetadata,
)
from stepflow.services.connections import ConnectionService

logger = logging.getLogger(__name__)


@dataclass
class HookResponse:
    stopped: bool = False
    stop_response: StopHookParams | None = None
    paused: bool = False
    pause_response: PauseHookParams | None = None
    tags: list[str] = field(default_factory=list)


class TagsManager:
    def __init__(self, hook_response: HookResponse):
        self._hook_response = hook_response

    async def add(self, name: str) -> None:
        self._hook_response.tags.append(name)


class ConnectionsManager:
    """Fetches connections for action code; a failed lookup yields None."""

    def __init__(self, connection_service: ConnectionService, hook_response: HookResponse):
        self._connection_service = connection_service
        self._hook_response = hook_response

    async def get(self, key: str) -> Any | None:
        try:
            connection = await self._connection_service.obtain(key)
        except Exception as e:
            logger.warning(f"   ⚠ Connection '{key}' unavailable: {e}")
            return None
        self._hook_response.tags.append(f"connection:{key}")
        return connection


def create_stop_hook(hook_response: HookResponse):
    def stop(params: StopHookParams | dict[str, Any] | None = None) -> None:
        if params is None:
            params = StopHookParams()
        elif isinstance(params, dict):
            params = StopHookParams.model_validate(params)
        hook_response.stopped = True
        hook_response.stop_response = params

    return stop


def create_pause_hook(hook_response: HookResponse, pause_request_id: str):
    """Pause hook bound to the context's pending pause request id.

    WEBHOOK pauses get ``request_id`` set to that id so the resume URL and
    the stored pause metadata agree.
    """

    def pause(params: PauseHookParams | dict[str, Any]) -> None:
        if isinstance(params, dict):
            params = PauseHookParams.model_validate(params)
        metadata = params.pause_metadata
        if isinstance(metadata, WebhookPauseMetadata):
            metadata = metadata.model_copy(update={"request_id": pause_request_id})
        elif not isinstance(metadata, DelayPauseMetadata):
            raise TypeError(f"Unsupported pause metadata: {type(metadata).__name__}")
        hook_response.paused = True
        hook_response.pause_response = PauseHookParams(pause_metadata=metadata)

    return pause
