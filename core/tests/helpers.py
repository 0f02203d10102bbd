"""Builders for pieces, actions and engine constants used across tests."""

import httpx

from stepflow.config import RetryConfig
from stepflow.flow.constants import EngineConstants
from stepflow.pieces import ActionDefinition, Piece, PieceLoader
from stepflow.schemas import Action, BranchChild, ErrorHandlingOptions, PieceActionSettings

PIECE_NAME = "test-piece"
PIECE_VERSION = "0.1.0"


def not_found_transport() -> httpx.MockTransport:
    return httpx.MockTransport(lambda request: httpx.Response(404, json={"message": "not found"}))


def make_piece(*actions: ActionDefinition, auth=None) -> Piece:
    return Piece(
        name=PIECE_NAME,
        version=PIECE_VERSION,
        actions={a.name: a for a in actions},
        auth=auth,
    )


def make_constants(*pieces: Piece, **overrides) -> EngineConstants:
    values = {
        "flow_id": "flow_1",
        "flow_run_id": "run_1",
        "project_id": "proj_1",
        "worker_token": "worker-token",
        "api_url": "http://api.test/api/",
        "server_url": "https://server.test/api/",
        "piece_loader": PieceLoader(list(pieces)),
        "retry": RetryConfig(max_attempts=4, retry_interval=1.0, retry_exponential=2.0, max_delay=60.0),
        "transport": not_found_transport(),
    }
    values.update(overrides)
    return EngineConstants(**values)


def make_action(
    name: str,
    action_name: str,
    *,
    input: dict | None = None,
    retry: bool = False,
    continue_on_failure: bool = False,
    children: dict[str, Action] | None = None,
    next_action: Action | None = None,
) -> Action:
    return Action(
        name=name,
        settings=PieceActionSettings(
            piece_name=PIECE_NAME,
            piece_version=PIECE_VERSION,
            action_name=action_name,
            input=input or {},
            error_handling_options=ErrorHandlingOptions(
                retry_on_failure=retry,
                continue_on_failure=continue_on_failure,
            ),
        ),
        children=[BranchChild(name=k, action=v) for k, v in children.items()] if children else None,
        next_action=next_action,
    )
