"""Connection lookup: fetch a project's app connection by its external key."""

from typing import Any
from urllib.parse import quote

import httpx

from stepflow.errors import ResolutionError
from stepflow.services.http import build_client, raise_for_status, send


class ConnectionService:
    def __init__(
        self,
        api_url: str,
        worker_token: str,
        project_id: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_url = api_url
        self._worker_token = worker_token
        self._project_id = project_id
        self._transport = transport

    async def obtain(self, key: str) -> Any:
        """Return the connection's value. Raises when it cannot be fetched."""
        async with build_client(self._api_url, self._worker_token, self._transport) as client:
            request = client.build_request(
                "GET",
                f"v1/worker/app-connections/{quote(key, safe='')}",
                params={"projectId": self._project_id},
            )
            response = await send(client, request, f"Connection lookup '{key}'")
        if response.status_code == 404:
            raise ResolutionError(f"Connection not found: {key}")
        raise_for_status(response, f"Connection lookup '{key}'")
        body = response.json()
        return body.get("value", body) if isinstance(body, dict) else body


def create_connection_service(
    api_url: str,
    worker_token: str,
    project_id: str,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ConnectionService:
    return ConnectionService(
        api_url=api_url,
        worker_token=worker_token,
        project_id=project_id,
        transport=transport,
    )
