from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from conftest import AUTH_URL, SAMPLE_MAP, WORLD_URL, FakeBackend

from asciimmo_client.errors import FetchError
from asciimmo_client.services import AuthService
from asciimmo_client.session import Session, SessionManager
from asciimmo_client.storage import MemoryStore
from asciimmo_client.world import WorldClient


def _world(http: httpx.AsyncClient, tmp_path: Path) -> WorldClient:
    sessions = SessionManager(MemoryStore(), AuthService(http, AUTH_URL))
    return WorldClient(http, WORLD_URL, sessions, fallback_path=tmp_path / "world.txt")


@pytest.mark.asyncio
async def test_fetch_world_without_session_omits_token(
    http: httpx.AsyncClient, backend: FakeBackend, tmp_path: Path
) -> None:
    world = _world(http, tmp_path)

    text = await world.fetch_world("42", "10", "10")

    assert text == SAMPLE_MAP
    params = backend.requests[0].url.params
    assert dict(params) == {"seed": "42", "width": "10", "height": "10"}
    assert "session_token" not in params


@pytest.mark.asyncio
async def test_fetch_world_with_session_includes_token(
    http: httpx.AsyncClient, backend: FakeBackend, tmp_path: Path
) -> None:
    sessions = SessionManager(MemoryStore(), AuthService(http, AUTH_URL))
    sessions.persist(Session(token="abc", username="alice"))
    world = WorldClient(http, WORLD_URL, sessions, fallback_path=tmp_path / "world.txt")

    await world.fetch_world("42", "10", "10")

    params = backend.requests[0].url.params
    assert params["session_token"] == "abc"
    assert params["seed"] == "42"


@pytest.mark.asyncio
async def test_fetch_world_passes_values_through_encoded(
    http: httpx.AsyncClient, backend: FakeBackend, tmp_path: Path
) -> None:
    world = _world(http, tmp_path)

    await world.fetch_world("4 2&x=1", "ten", "")

    params = backend.requests[0].url.params
    assert params["seed"] == "4 2&x=1"
    assert params["width"] == "ten"
    assert "x" not in params


@pytest.mark.asyncio
async def test_fetch_world_non_success_status(
    http: httpx.AsyncClient, backend: FakeBackend, tmp_path: Path
) -> None:
    backend.world_status = 503
    world = _world(http, tmp_path)

    with pytest.raises(FetchError) as exc_info:
        await world.fetch_world("1", "2", "3")

    message = exc_info.value.message
    assert message.startswith("Error fetching /world: HTTP 503")
    assert "world.txt" in message


@pytest.mark.asyncio
async def test_fetch_world_transport_failure(
    http: httpx.AsyncClient, backend: FakeBackend, tmp_path: Path
) -> None:
    backend.raise_error = httpx.ConnectError("connection refused")
    world = _world(http, tmp_path)

    with pytest.raises(FetchError) as exc_info:
        await world.fetch_world("1", "2", "3")

    assert "connection refused" in exc_info.value.message
    assert len(backend.requests) == 1


@pytest.mark.asyncio
async def test_load_fallback(http: httpx.AsyncClient, tmp_path: Path) -> None:
    world = _world(http, tmp_path)

    with pytest.raises(FetchError) as exc_info:
        world.load_fallback()
    assert exc_info.value.message.startswith("Error loading world.txt")

    (tmp_path / "world.txt").write_text(SAMPLE_MAP, encoding="utf-8")
    assert world.load_fallback() == SAMPLE_MAP


@pytest.mark.asyncio
async def test_load_fallback_with_invalid_utf8_is_fetch_error(
    http: httpx.AsyncClient, tmp_path: Path
) -> None:
    world = _world(http, tmp_path)
    (tmp_path / "world.txt").write_bytes(b"~~\xff\xfe..\n")

    with pytest.raises(FetchError) as exc_info:
        world.load_fallback()

    assert exc_info.value.message.startswith("Error loading world.txt: ")
    assert "utf-8" in exc_info.value.message
