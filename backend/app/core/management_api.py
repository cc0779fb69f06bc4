"""HTTP client for the identity platform's Management API."""

import logging
from typing import Any

import httpx

logger = logging.getLogger("session_console")


class ManagementApiError(RuntimeError):
    """Structured error from the Management API (status, error code, message)."""

    def __init__(self, status_code: int, code: str, message: str) -> None:
        super().__init__(f"{status_code} {code}: {message}")
        self.status_code = status_code
        self.code = code
        self.message = message


class ManagementApiClient:
    """Async Management API client. One instance per application, closed on shutdown."""

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("management api base_url must not be empty")
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch(self, key: str) -> Any:
        """GET /api/{key} and return the decoded JSON body."""
        response = await self._request("GET", f"/api/{key}")
        return response.json()

    async def revoke_user_session(self, user_id: str, session_id: str) -> None:
        await self._request("DELETE", f"/api/users/{user_id}/sessions/{session_id}")
        logger.info("session revoked upstream user_id=%s session_id=%s", user_id, session_id)

    async def _request(self, method: str, path: str) -> httpx.Response:
        try:
            response = await self._client.request(method, path)
        except httpx.HTTPError as exc:
            raise ManagementApiError(
                status_code=502,
                code="network_error",
                message=f"{method} {path} failed: {exc}",
            ) from exc

        if response.is_success:
            return response
        raise _error_from_response(response, method, path)


def _error_from_response(response: httpx.Response, method: str, path: str) -> ManagementApiError:
    code = "request.general"
    message = f"management api returned {response.status_code} for {method} {path}"
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        code = str(body.get("code") or code)
        message = str(body.get("message") or message)
    return ManagementApiError(status_code=response.status_code, code=code, message=message)
