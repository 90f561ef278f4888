"""Farm API client — implements the RecordGateway and AuthGateway interfaces.

Talks to the farm REST API (``<base>/<resource>/``) with httpx using a
Bearer token per call. Every collection follows the same conventions:
trailing slashes, JSON arrays for lists, JSON error maps for rejected
writes and a binary workbook under ``<resource>/export/``.
"""

import logging
from typing import Any

import httpx

from dairy_dashboard.application.interfaces.auth_gateway import AuthGateway
from dairy_dashboard.application.interfaces.record_gateway import RecordGateway
from dairy_dashboard.domain.entities import UserSession
from dairy_dashboard.domain.exceptions import (
    AuthenticationFailedError,
    FarmApiError,
    RecordNotFoundError,
    RecordValidationError,
    join_error_messages,
)

logger = logging.getLogger(__name__)

LOGIN_FAILED = "Login failed"


class FarmApiClient(RecordGateway, AuthGateway):
    """Infrastructure adapter — connects to the farm REST API.

    An injected ``http_client`` is reused (and owned by the caller);
    otherwise a short-lived client is created per request.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000/api",
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http_client = http_client

    # ── Helpers ─────────────────────────────────────────────────────

    def _url(self, *parts: object) -> str:
        path = "/".join(str(p).strip("/") for p in parts)
        return f"{self._base_url}/{path}/"

    @staticmethod
    def _get_headers(token: str | None = None) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        token: str | None,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        """Send one request; transport failures become FarmApiError(None, ...)."""
        client = await self._get_client()
        should_close = self._http_client is None
        try:
            return await client.request(
                method, url, headers=self._get_headers(token), params=params, json=json
            )
        except httpx.HTTPError as e:
            logger.warning("Farm API %s %s unreachable: %s", method, url, e)
            raise FarmApiError(status_code=None, message=str(e) or type(e).__name__) from e
        finally:
            if should_close:
                await client.aclose()

    def _raise_for_status(
        self,
        response: httpx.Response,
        resource: str,
        record_id: int | str | None = None,
        *,
        write: bool = False,
    ) -> None:
        """Map a non-2xx response to the matching domain exception."""
        if response.is_success:
            return

        status = response.status_code
        logger.info("Farm API %s %s → %d", response.request.method, response.request.url, status)
        if status == 401:
            raise AuthenticationFailedError()
        if status == 404:
            raise RecordNotFoundError(resource, record_id if record_id is not None else "")

        data = _json_or_none(response)
        if write and 400 <= status < 500 and isinstance(data, (dict, list)):
            raise RecordValidationError(data if isinstance(data, dict) else {"errors": data})

        message = join_error_messages(data) if data is not None else response.text
        raise FarmApiError(status_code=status, message=message or response.reason_phrase)

    # ── RecordGateway ───────────────────────────────────────────────

    async def list_records(
        self, resource: str, *, token: str, params: dict[str, str] | None = None
    ) -> list[dict[str, Any]]:
        response = await self._request("GET", self._url(resource), token=token, params=params)
        self._raise_for_status(response, resource)

        data = _json_or_none(response)
        if isinstance(data, dict) and isinstance(data.get("results"), list):
            # paginated endpoints
            data = data["results"]
        if not isinstance(data, list):
            raise FarmApiError(response.status_code, f"Expected a JSON array from {resource}")
        return data

    async def create_record(
        self, resource: str, payload: dict[str, Any], *, token: str
    ) -> dict[str, Any]:
        response = await self._request("POST", self._url(resource), token=token, json=payload)
        self._raise_for_status(response, resource, write=True)
        return _json_or_none(response) or {}

    async def update_record(
        self, resource: str, record_id: int | str, payload: dict[str, Any], *, token: str
    ) -> dict[str, Any]:
        response = await self._request(
            "PUT", self._url(resource, record_id), token=token, json=payload
        )
        self._raise_for_status(response, resource, record_id, write=True)
        return _json_or_none(response) or {}

    async def delete_record(self, resource: str, record_id: int | str, *, token: str) -> None:
        response = await self._request("DELETE", self._url(resource, record_id), token=token)
        self._raise_for_status(response, resource, record_id)

    async def export_records(
        self, resource: str, *, token: str, params: dict[str, str] | None = None
    ) -> bytes:
        response = await self._request(
            "GET", self._url(resource, "export"), token=token, params=params
        )
        self._raise_for_status(response, resource)
        return response.content

    async def perform_action(
        self,
        resource: str,
        record_id: int | str,
        action_path: str,
        payload: dict[str, Any],
        *,
        token: str,
        method: str = "POST",
    ) -> dict[str, Any]:
        response = await self._request(
            method, self._url(resource, record_id, action_path), token=token, json=payload
        )
        self._raise_for_status(response, resource, record_id, write=True)
        return _json_or_none(response) or {}

    # ── AuthGateway ─────────────────────────────────────────────────

    async def login(self, username: str, password: str, role: str) -> UserSession:
        response = await self._request(
            "POST",
            self._url("login"),
            token=None,
            json={"username": username, "password": password, "role": role},
        )
        data = _json_or_none(response)
        if not response.is_success:
            raise AuthenticationFailedError(_login_error(data))
        if not isinstance(data, dict) or "access" not in data:
            raise FarmApiError(response.status_code, "Malformed login response")

        return UserSession(
            user_id=str(data.get("user_id", "")),
            username=data.get("username", username),
            token=data["access"],
            role=data.get("role", ""),
        )

    async def list_users(self, *, token: str) -> list[dict[str, Any]]:
        response = await self._request("GET", self._url("users"), token=token)
        self._raise_for_status(response, "users")
        data = _json_or_none(response)
        return data if isinstance(data, list) else []


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def _login_error(data: Any) -> str:
    """The message the farm API gives for a rejected login."""
    if not isinstance(data, dict):
        return LOGIN_FAILED
    if data.get("detail"):
        return str(data["detail"])
    if data.get("non_field_errors"):
        return join_error_messages(data["non_field_errors"])
    if data.get("role"):
        return join_error_messages(data["role"])
    return LOGIN_FAILED
