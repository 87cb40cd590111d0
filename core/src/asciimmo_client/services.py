from __future__ import annotations

import logging
from typing import Any

import httpx

from asciimmo_client.config import ClientConfig
from asciimmo_client.errors import AuthError, TransportError

logger = logging.getLogger(__name__)

GENERIC_AUTH_ERROR = "Unknown error"


def build_http_client(
    config: ClientConfig, *, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    """Shared async HTTP client for the Auth and World services.

    ``transport`` lets tests route requests to an in-process stand-in.
    """

    return httpx.AsyncClient(
        verify=config.services.verify_tls,
        timeout=config.services.timeout_seconds,
        transport=transport,
    )


def describe_transport_failure(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__


class AuthService:
    """HTTP client for the remote Auth Service.

    Endpoints:
    - POST /auth/register {username, email, password} -> {message?}
    - POST /auth/login {username, password} -> {session_token, message?}
    - GET /auth/confirm?token=... -> {message?}
    """

    def __init__(self, http: httpx.AsyncClient, base_url: str) -> None:
        self._http = http
        self._base_url = base_url.rstrip("/")

    async def login(self, username: str, password: str) -> str:
        """Return the session token issued for these credentials."""

        resp, data = await self._request(
            "POST", "/auth/login", json={"username": username, "password": password}
        )
        token = data.get("session_token")
        if resp.is_success and isinstance(token, str) and token:
            return token
        raise AuthError(_server_message(data), status_code=resp.status_code)

    async def register(self, username: str, email: str, password: str) -> str:
        resp, data = await self._request(
            "POST",
            "/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        if not resp.is_success:
            raise AuthError(_server_message(data), status_code=resp.status_code)
        return str(data.get("message") or "")

    async def confirm_email(self, token: str) -> str:
        resp, data = await self._request("GET", "/auth/confirm", params={"token": token})
        if not resp.is_success:
            raise AuthError(_server_message(data), status_code=resp.status_code)
        return str(data.get("message") or "")

    async def _request(
        self, method: str, path: str, **kwargs: Any
    ) -> tuple[httpx.Response, dict[str, Any]]:
        url = f"{self._base_url}{path}"
        try:
            resp = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, describe_transport_failure(exc))
            raise TransportError(describe_transport_failure(exc)) from exc

        logger.info("%s %s - %s", method, path, resp.status_code)

        try:
            data = resp.json()
        except ValueError as exc:
            raise TransportError(f"Malformed response from {path}") from exc
        if not isinstance(data, dict):
            raise TransportError(f"Malformed response from {path}")
        return resp, data


def _server_message(data: dict[str, Any]) -> str:
    message = data.get("message")
    if isinstance(message, str) and message.strip():
        return message
    return GENERIC_AUTH_ERROR
