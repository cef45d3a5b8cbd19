"""HTTP client for the SiteCraft REST API."""

import asyncio
import logging
import os
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

# Retry configuration for idempotent reads (connection errors, 5xx).
MAX_RETRIES = 3
RETRY_BASE_DELAY = 1.0  # seconds; exponential: 1s, 2s, 4s


class SiteCraftAPIError(Exception):
    """Non-2xx response from the API, carrying the structured error body."""

    def __init__(self, status_code: int, error_code: str, message: str, details: Optional[dict] = None):
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(f"{status_code} {error_code}: {message}")

    @classmethod
    def from_response(cls, resp: httpx.Response) -> "SiteCraftAPIError":
        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        return cls(
            resp.status_code,
            body.get("error", "HTTP_ERROR"),
            body.get("message", resp.reason_phrase or "Request failed"),
            body.get("details"),
        )


class SiteCraftClient:
    """Async client wrapping the SiteCraft backend REST API.

    Configuration via environment variables:
        SITECRAFT_API_URL     — Backend base URL (default: http://localhost:8000)
        SITECRAFT_API_TOKEN   — Optional Bearer token for authenticated access
        SITECRAFT_API_TIMEOUT — Request timeout in seconds (default: 180)

    Only reads are retried. Revisions debit credits on the server, so a
    revision request is sent exactly once.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        max_retries: int = MAX_RETRIES,
    ) -> None:
        self.base_url = base_url or os.environ.get("SITECRAFT_API_URL", "http://localhost:8000")
        self.token = token if token is not None else os.environ.get("SITECRAFT_API_TOKEN", "")
        self.timeout = timeout or float(os.environ.get("SITECRAFT_API_TIMEOUT", "180"))
        self.max_retries = max(1, max_retries)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            headers: dict[str, str] = {}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send once; raise SiteCraftAPIError on any non-2xx status."""
        client = await self._get_client()
        resp = await client.request(method, path, **kwargs)
        if resp.is_error:
            raise SiteCraftAPIError.from_response(resp)
        return resp

    async def _get_with_retry(self, path: str, **kwargs: Any) -> httpx.Response:
        """GET with exponential backoff on connection errors and 5xx.

        Client errors (4xx) are raised immediately.
        """
        last_exc: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                return await self._request("GET", path, **kwargs)
            except SiteCraftAPIError as exc:
                if exc.status_code < 500:
                    raise
                last_exc = exc
            except (httpx.ConnectError, httpx.TimeoutException) as exc:
                last_exc = exc

            if attempt < self.max_retries - 1:
                delay = RETRY_BASE_DELAY * (2 ** attempt)
                logger.warning(
                    "GET %s failed (attempt %d/%d), retrying in %.1fs: %s",
                    path, attempt + 1, self.max_retries, delay, last_exc,
                )
                await asyncio.sleep(delay)

        raise last_exc  # type: ignore[misc]

    async def create_project(self, prompt: str, name: Optional[str] = None) -> dict[str, Any]:
        """Create a project. Maps to POST /api/projects."""
        payload: dict[str, Any] = {"prompt": prompt}
        if name:
            payload["name"] = name
        resp = await self._request("POST", "/api/projects", json=payload)
        return resp.json()

    async def get_project(self, project_id: str) -> dict[str, Any]:
        """Full project with versions and timeline. Maps to GET /api/projects/{id}."""
        resp = await self._get_with_retry(f"/api/projects/{project_id}")
        return resp.json()

    async def list_projects(self) -> list[dict[str, Any]]:
        resp = await self._get_with_retry("/api/projects")
        return resp.json()

    async def revise(self, project_id: str, message: str) -> str:
        """Request a revision. Maps to POST /api/projects/{id}/revisions."""
        resp = await self._request(
            "POST", f"/api/projects/{project_id}/revisions", json={"message": message},
        )
        return resp.json()["message"]

    async def rollback(self, project_id: str, version_id: str) -> str:
        """Maps to POST /api/projects/{id}/rollback/{version_id}."""
        resp = await self._request("POST", f"/api/projects/{project_id}/rollback/{version_id}")
        return resp.json()["message"]

    async def save_code(self, project_id: str, code: str) -> str:
        """Maps to PUT /api/projects/{id}/code."""
        resp = await self._request("PUT", f"/api/projects/{project_id}/code", json={"code": code})
        return resp.json()["message"]

    async def get_credits(self) -> int:
        resp = await self._get_with_retry("/api/users/me/credits")
        return resp.json()["credits"]

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
