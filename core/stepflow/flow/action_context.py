"""
ActionContext - everything action code can see during one run.

Built fresh for every attempt by the piece executor. Handles that signal
control flow (``run.stop``, ``run.pause``, ``tags``, ``connections``) only
write into the attempt's HookResponse.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any
from urllib.parse import urlencode

from stepflow.flow.hooks import ConnectionsManager, TagsManager
from stepflow.services.files import FilesService
from stepflow.services.storage import ContextStore


class ExecutionType(StrEnum):
    BEGIN = "BEGIN"
    RESUME = "RESUME"


@dataclass(frozen=True)
class ServerContext:
    token: str
    api_url: str
    public_url: str


@dataclass(frozen=True)
class RunContext:
    id: str
    stop: Callable[..., None]
    pause: Callable[..., None]


@dataclass(frozen=True)
class ProjectContext:
    id: str
    external_id: str | None = None


def build_resume_url(
    server_url: str,
    flow_run_id: str,
    pause_request_id: str,
    query_params: dict[str, Any] | None = None,
) -> str:
    """``{server_url}v1/flow-runs/{run}/requests/{pause_request_id}?{query}``"""
    url = f"{server_url}v1/flow-runs/{flow_run_id}/requests/{pause_request_id}"
    query = urlencode(query_params or {})
    return f"{url}?{query}" if query else url


@dataclass(frozen=True)
class ActionContext:
    execution_type: ExecutionType
    resume_payload: dict[str, Any] | None
    store: ContextStore
    auth: Any
    files: FilesService
    server: ServerContext
    props_value: dict[str, Any]
    tags: TagsManager
    connections: ConnectionsManager
    server_url: str
    run: RunContext
    project: ProjectContext
    pause_request_id: str

    def generate_resume_url(self, query_params: dict[str, Any] | None = None) -> str:
        return build_resume_url(
            server_url=self.server_url,
            flow_run_id=self.run.id,
            pause_request_id=self.pause_request_id,
            query_params=query_params,
        )
