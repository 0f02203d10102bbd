"""
Files Service - lets an action hand back a file produced by a step.

Two backends:
- local: the file is inlined as a base64 data URL (test runs, local workers)
- db: the file is uploaded to the server and its URL returned
"""

import base64
import mimetypes
from enum import StrEnum

import httpx

from stepflow.services.http import build_client, raise_for_status, send


class FilesServiceType(StrEnum):
    LOCAL = "local"
    DB = "db"


class FilesService:
    def __init__(
        self,
        api_url: str,
        worker_token: str,
        flow_id: str,
        step_name: str,
        type: FilesServiceType = FilesServiceType.LOCAL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_url = api_url
        self._worker_token = worker_token
        self._flow_id = flow_id
        self._step_name = step_name
        self._type = FilesServiceType(type)
        self._transport = transport

    async def write(self, file_name: str, data: bytes) -> str:
        """Persist ``data`` and return a URL later steps can read it from."""
        if self._type == FilesServiceType.LOCAL:
            mime_type = mimetypes.guess_type(file_name)[0] or "application/octet-stream"
            encoded = base64.b64encode(data).decode("ascii")
            return f"data:{mime_type};base64,{encoded}"

        async with build_client(self._api_url, self._worker_token, self._transport) as client:
            request = client.build_request(
                "POST",
                "v1/step-files",
                data={"stepName": self._step_name, "flowId": self._flow_id, "name": file_name},
                files={"file": (file_name, data)},
            )
            response = await send(client, request, f"Upload of '{file_name}'")
        raise_for_status(response, f"Upload of '{file_name}'")
        return response.json()["url"]


def create_files_service(
    api_url: str,
    worker_token: str,
    flow_id: str,
    step_name: str,
    type: FilesServiceType | str = FilesServiceType.LOCAL,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FilesService:
    return FilesService(
        api_url=api_url,
        worker_token=worker_token,
        flow_id=flow_id,
        step_name=step_name,
        type=FilesServiceType(type),
        transport=transport,
    )
