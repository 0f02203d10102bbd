"""Read-only configuration bundle shared by every executor in a run."""

from dataclasses import dataclass, field
from typing import Any

import httpx

from stepflow.config import RetryConfig
from stepflow.pieces.loader import PieceLoader
from stepflow.services.files import FilesServiceType
from stepflow.services.variables import VariableService


@dataclass(frozen=True)
class EngineConstants:
    """
    Identity, endpoints and collaborators for one flow run.

    Example:
        constants = EngineConstants(
            flow_id="flow_1",
            flow_run_id="run_1",
            project_id="proj_1",
            worker_token="token",
            api_url="http://127.0.0.1:3000/api/",
            server_url="https://cloud.example.com/api/",
            piece_loader=PieceLoader([mail_piece]),
        )
    """

    flow_id: str
    flow_run_id: str
    project_id: str
    worker_token: str
    api_url: str
    server_url: str
    piece_loader: PieceLoader = field(default_factory=PieceLoader)
    variable_service: VariableService = field(default_factory=VariableService)
    external_project_id: str | None = None
    files_service_type: FilesServiceType = FilesServiceType.LOCAL
    test_single_step_mode: bool = False
    resume_payload: dict[str, Any] | None = None
    retry: RetryConfig = field(default_factory=RetryConfig)
    # Only set by tests (httpx.MockTransport); None means real network I/O
    transport: httpx.AsyncBaseTransport | None = None
