"""
Context Store - key/value storage scoped to a flow.

Action code gets a ContextStore on ``ctx.store``. Keys are namespaced by flow
id so two flows never see each other's entries.
"""

import logging
from typing import Any

import httpx

from stepflow.services.http import build_client, raise_for_status, send

logger = logging.getLogger(__name__)


class ContextStore:
    """Async key/value store backed by the server's store-entries API."""

    def __init__(
        self,
        api_url: str,
        worker_token: str,
        flow_id: str,
        prefix: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_url = api_url
        self._worker_token = worker_token
        self._flow_id = flow_id
        self._prefix = prefix
        self._transport = transport

    def _scoped_key(self, key: str) -> str:
        if not key:
            raise ValueError("Store key cannot be empty")
        return f"{self._prefix}flow_{self._flow_id}/{key}"

    async def put(self, key: str, value: Any) -> Any:
        scoped = self._scoped_key(key)
        async with build_client(self._api_url, self._worker_token, self._transport) as client:
            request = client.build_request(
                "POST", "v1/store-entries", json={"key": scoped, "value": value}
            )
            response = await send(client, request, f"Store put '{key}'")
        raise_for_status(response, f"Store put '{key}'")
        logger.debug(f"Stored key {scoped}")
        return value

    async def get(self, key: str) -> Any | None:
        scoped = self._scoped_key(key)
        async with build_client(self._api_url, self._worker_token, self._transport) as client:
            request = client.build_request("GET", "v1/store-entries", params={"key": scoped})
            response = await send(client, request, f"Store get '{key}'")
        if response.status_code == 404:
            return None
        raise_for_status(response, f"Store get '{key}'")
        return response.json().get("value")

    async def delete(self, key: str) -> None:
        scoped = self._scoped_key(key)
        async with build_client(self._api_url, self._worker_token, self._transport) as client:
            request = client.build_request("DELETE", "v1/store-entries", params={"key": scoped})
            response = await send(client, request, f"Store delete '{key}'")
        if response.status_code == 404:
            return
        raise_for_status(response, f"Store delete '{key}'")


def create_context_store(
    api_url: str,
    worker_token: str,
    flow_id: str,
    prefix: str = "",
    transport: httpx.AsyncBaseTransport | None = None,
) -> ContextStore:
    return ContextStore(
        api_url=api_url,
        worker_token=worker_token,
        flow_id=flow_id,
        prefix=prefix,
        transport=transport,
    )
