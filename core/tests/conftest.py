from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import pytest
import pytest_asyncio

AUTH_URL = "https://localhost:8081"
WORLD_URL = "https://localhost:8080"

SAMPLE_MAP = "~~~..^^\n~~...^^\n~....T.\n"


class FakeBackend:
    """In-process stand-in for the Auth and World services.

    Responses are configured per endpoint; every request is recorded.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.login_response: tuple[int, Any] = (200, {"session_token": "abc"})
        self.login_tokens: dict[str, str] = {}
        self.login_delays: dict[str, float] = {}
        self.register_response: tuple[int, Any] = (
            201,
            {"status": "ok", "message": "registration successful"},
        )
        self.confirm_response: tuple[int, Any] = (
            200,
            {"status": "ok", "message": "email confirmed successfully"},
        )
        self.world_status = 200
        self.world_text = SAMPLE_MAP
        self.raise_error: Exception | None = None

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error is not None:
            raise self.raise_error

        path = request.url.path
        if path == "/auth/login":
            body = json.loads(request.content)
            delay = self.login_delays.get(body["username"])
            if delay:
                await asyncio.sleep(delay)
            if body["username"] in self.login_tokens:
                return httpx.Response(
                    200, json={"session_token": self.login_tokens[body["username"]]}
                )
            return _respond(self.login_response)
        if path == "/auth/register":
            return _respond(self.register_response)
        if path == "/auth/confirm":
            return _respond(self.confirm_response)
        if path == "/world":
            return httpx.Response(self.world_status, text=self.world_text)
        return httpx.Response(404, json={"status": "error", "message": "not found"})


def _respond(canned: tuple[int, Any]) -> httpx.Response:
    status, body = canned
    if isinstance(body, str):
        return httpx.Response(status, text=body)
    return httpx.Response(status, json=body)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest_asyncio.fixture
async def http(backend: FakeBackend):
    async with httpx.AsyncClient(transport=backend.transport) as client:
        yield client
