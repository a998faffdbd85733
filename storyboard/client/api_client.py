"""
Storyboard Client — REST API Wrapper
=====================================

What:  One async method per Storyboard endpoint, built on httpx.AsyncClient.
How:   The AsyncClient keeps the session cookie between calls. Any write that
       comes back 401 raises AuthRequiredError, which the controller turns
       into its session-expiry recovery path. Other failures raise
       ClientRequestError.

Usage:
    async with StoryboardAPI("http://localhost:3856") as api:
        await api.login("admin", "admin")
        part = await api.create_part({"title": "Intro", "content": "Scene one"})

Tests pass `transport=httpx.ASGITransport(app=app)` to talk to the app
in-process.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

from storyboard.schemas.part import PartResponse

logger = logging.getLogger(__name__)


class ClientRequestError(Exception):
    """A request failed for a reason other than an expired session."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthRequiredError(ClientRequestError):
    """A protected endpoint answered 401: the session is missing or expired."""

    def __init__(self):
        super().__init__("AUTH_REQUIRED", status_code=401)


class LoginFailedError(ClientRequestError):
    """Login was rejected. `invalid` is True for wrong credentials."""

    def __init__(self, message: str, status_code: Optional[int] = None, invalid: bool = False):
        super().__init__(message, status_code=status_code)
        self.invalid = invalid


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        return response.json().get("message") or default
    except ValueError:
        return default


class StoryboardAPI:

    def __init__(
        self,
        base_url: str = "http://localhost:3856",
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._client = client or httpx.AsyncClient(base_url=base_url, transport=transport)

    async def __aenter__(self) -> "StoryboardAPI":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _check_write(self, response: httpx.Response, action: str) -> None:
        if response.status_code == 401:
            raise AuthRequiredError()
        if response.is_error:
            logger.warning("%s failed with HTTP %d", action, response.status_code)
            raise ClientRequestError(
                _error_message(response, f"Failed to {action}"),
                status_code=response.status_code,
            )

    # ── Auth ──────────────────────────────────────────────────────────────

    async def check_auth(self) -> Dict[str, Any]:
        response = await self._client.get("/api/auth/status")
        if response.is_error:
            return {"authenticated": False}
        return response.json()

    async def login(self, username: str, password: str) -> Dict[str, Any]:
        response = await self._client.post(
            "/api/auth/login",
            json={"username": username, "password": password},
        )
        if response.is_error:
            invalid = False
            try:
                invalid = response.json().get("error") == "invalid_credentials"
            except ValueError:
                pass
            raise LoginFailedError(
                _error_message(response, "Login failed"),
                status_code=response.status_code,
                invalid=invalid,
            )
        return response.json()

    async def logout(self) -> Dict[str, Any]:
        response = await self._client.post("/api/auth/logout")
        if response.is_error:
            raise ClientRequestError("Logout failed", status_code=response.status_code)
        return response.json()

    # ── Parts ─────────────────────────────────────────────────────────────

    async def get_parts(self) -> List[PartResponse]:
        response = await self._client.get("/api/parts")
        if response.is_error:
            raise ClientRequestError("Failed to fetch parts", status_code=response.status_code)
        return [PartResponse.model_validate(item) for item in response.json()]

    async def get_part(self, part_id: int) -> PartResponse:
        response = await self._client.get(f"/api/parts/{part_id}")
        if response.is_error:
            raise ClientRequestError(
                _error_message(response, "Failed to fetch part"),
                status_code=response.status_code,
            )
        return PartResponse.model_validate(response.json())

    async def create_part(self, data: Dict[str, Any]) -> PartResponse:
        response = await self._client.post("/api/parts", json=data)
        self._check_write(response, "create part")
        return PartResponse.model_validate(response.json())

    async def update_part(self, part_id: int, data: Dict[str, Any]) -> PartResponse:
        response = await self._client.put(f"/api/parts/{part_id}", json=data)
        self._check_write(response, "update part")
        return PartResponse.model_validate(response.json())

    async def delete_part(self, part_id: int) -> Dict[str, Any]:
        response = await self._client.delete(f"/api/parts/{part_id}")
        self._check_write(response, "delete part")
        return response.json()

    async def reorder_parts(self, parts: Iterable[Dict[str, int]]) -> List[PartResponse]:
        response = await self._client.put(
            "/api/parts/reorder", json={"parts": list(parts)}
        )
        self._check_write(response, "reorder parts")
        return [PartResponse.model_validate(item) for item in response.json()]

    async def upload_image(self, filename: str, content: bytes, content_type: str) -> str:
        response = await self._client.post(
            "/api/upload",
            files={"image": (filename, content, content_type)},
        )
        self._check_write(response, "upload image")
        return response.json()["path"]
