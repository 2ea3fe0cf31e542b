"""HTTP client for the diagram store REST API."""

import logging
import os
from typing import Any, Optional
from urllib.parse import quote

import httpx

from .errors import STATUS_ERRORS, DiagramClientError, DiagramNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8080"
DEFAULT_TIMEOUT = 30.0


def _diagram_path(diagram_id: str) -> str:
    return f"/api/diagrams/{quote(diagram_id, safe='')}"


def _error_from_response(resp: httpx.Response) -> DiagramClientError:
    """Build the typed error for a non-2xx response."""
    message = f"Request failed with status {resp.status_code}"
    error_code: Optional[str] = None
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error_code = body.get("error")
        message = body.get("message") or error_code or message
    error_class = STATUS_ERRORS.get(resp.status_code, DiagramClientError)
    return error_class(message, status_code=resp.status_code, error_code=error_code)


class DiagramApiClient:
    """Async client wrapping the diagram store REST API.

    Configuration via environment variables (constructor arguments win):
        DIAGRAM_API_URL     : backend base URL (default: http://localhost:8080)
        DIAGRAM_API_TIMEOUT : request timeout in seconds (default: 30)

    Failed requests are never retried; non-2xx answers raise the matching
    DiagramClientError subclass.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url or os.environ.get("DIAGRAM_API_URL", DEFAULT_API_URL)
        if timeout is None:
            timeout = float(os.environ.get("DIAGRAM_API_TIMEOUT", DEFAULT_TIMEOUT))
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        client = await self._get_client()
        try:
            resp = await client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Request %s %s failed: %s", method, path, exc)
            raise DiagramClientError(f"{method} {path} failed: {exc}") from exc

        if resp.is_error:
            error = _error_from_response(resp)
            logger.warning(
                "Request %s %s returned %d: %s",
                method, path, resp.status_code, error.message,
            )
            raise error
        return resp

    async def health(self) -> dict[str, Any]:
        """Maps to GET /api/health."""
        resp = await self._request("GET", "/api/health")
        return resp.json()

    # ----- config ----------------------------------------------------------

    async def get_config(self) -> dict[str, Any]:
        resp = await self._request("GET", "/api/config")
        return resp.json()

    async def update_config(self, config: dict[str, Any]) -> dict[str, Any]:
        """Merge keys into the stored config. Maps to PUT /api/config."""
        resp = await self._request("PUT", "/api/config", json=config)
        return resp.json()

    # ----- filters ---------------------------------------------------------

    async def get_filter(self, diagram_id: str) -> Optional[dict[str, Any]]:
        """Stored filter, or None when the diagram has none."""
        try:
            resp = await self._request("GET", f"{_diagram_path(diagram_id)}/filter")
        except DiagramNotFoundError:
            return None
        return resp.json()

    async def put_filter(self, diagram_id: str, diagram_filter: dict[str, Any]) -> dict[str, Any]:
        resp = await self._request("PUT", f"{_diagram_path(diagram_id)}/filter", json=diagram_filter)
        return resp.json()

    async def delete_filter(self, diagram_id: str) -> None:
        await self._request("DELETE", f"{_diagram_path(diagram_id)}/filter")

    # ----- diagrams --------------------------------------------------------

    async def create_diagram(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Maps to POST /api/diagrams. Raises DiagramConflictError on a taken id."""
        resp = await self._request("POST", "/api/diagrams", json=payload)
        return resp.json()

    async def list_diagrams(self, full: bool = False) -> list[dict[str, Any]]:
        """Summaries, or full payloads when *full* is set. Newest first."""
        params = {"full": "1"} if full else None
        resp = await self._request("GET", "/api/diagrams", params=params)
        return resp.json()

    async def get_diagram(self, diagram_id: str) -> dict[str, Any]:
        resp = await self._request("GET", _diagram_path(diagram_id))
        return resp.json()

    async def replace_diagram(self, diagram_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Maps to PUT /api/diagrams/{id}."""
        resp = await self._request("PUT", _diagram_path(diagram_id), json=payload)
        return resp.json()

    async def patch_diagram(self, diagram_id: str, partial: dict[str, Any]) -> dict[str, Any]:
        """Maps to PATCH /api/diagrams/{id}. The response may carry a new id."""
        resp = await self._request("PATCH", _diagram_path(diagram_id), json=partial)
        return resp.json()

    async def delete_diagram(self, diagram_id: str) -> None:
        await self._request("DELETE", _diagram_path(diagram_id))

    # ----- versions --------------------------------------------------------

    async def list_versions(self, diagram_id: str) -> list[dict[str, Any]]:
        resp = await self._request("GET", f"{_diagram_path(diagram_id)}/versions")
        return resp.json()

    async def get_version(self, diagram_id: str, version_id: int) -> dict[str, Any]:
        resp = await self._request("GET", f"{_diagram_path(diagram_id)}/versions/{version_id}")
        return resp.json()

    async def restore_version(self, diagram_id: str, version_id: int) -> dict[str, Any]:
        """Maps to POST /api/diagrams/{id}/versions/{version_id}/restore."""
        resp = await self._request(
            "POST", f"{_diagram_path(diagram_id)}/versions/{version_id}/restore",
        )
        return resp.json()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
