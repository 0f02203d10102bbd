"""HTTP plumbing shared by the service clients that talk to the server API."""

import httpx

from stepflow.errors import ExecutionError, TransientError

DEFAULT_TIMEOUT = 30.0


def build_client(
    api_url: str,
    worker_token: str,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Async client authenticated with the worker token."""
    return httpx.AsyncClient(
        base_url=api_url,
        headers={
            "Authorization": f"Bearer {worker_token}",
            "Accept": "application/json",
        },
        transport=transport,
        timeout=DEFAULT_TIMEOUT,
    )


def raise_for_status(response: httpx.Response, what: str) -> None:
    """Map HTTP error codes onto the engine's error taxonomy."""
    if response.status_code < 400:
        return
    detail = response.text[:200]
    if response.status_code == 429 or response.status_code >= 500:
        raise TransientError(f"{what} failed (HTTP {response.status_code}): {detail}")
    raise ExecutionError(f"{what} failed (HTTP {response.status_code}): {detail}")


async def send(client: httpx.AsyncClient, request: httpx.Request, what: str) -> httpx.Response:
    """Send a request, turning network failures into TransientError."""
    try:
        return await client.send(request)
    except httpx.TransportError as e:
        raise TransientError(f"{what} failed: {e}") from e
