from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

import httpx

from asciimmo_client.config import ClientConfig
from asciimmo_client.errors import AuthError, FetchError, TransportError, ValidationError
from asciimmo_client.services import AuthService
from asciimmo_client.session import SessionManager
from asciimmo_client.storage import SessionStore
from asciimmo_client.world import WorldClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginRequest:
    username: str
    password: str


@dataclass(frozen=True)
class RegisterRequest:
    username: str
    email: str
    password: str


@dataclass(frozen=True)
class WorldRequest:
    seed: str
    width: str
    height: str


@dataclass(frozen=True)
class StatusMessage:
    text: str
    is_error: bool = False


@dataclass(frozen=True)
class WorldResult:
    map_text: str
    is_error: bool = False


class Actions:
    """User-facing operations, independent of any UI toolkit.

    Every failure is turned into an error status; none of them raise, and a
    failed action leaves the session untouched.
    """

    def __init__(self, sessions: SessionManager, world: WorldClient) -> None:
        self.sessions = sessions
        self.world = world

    async def register(self, req: RegisterRequest) -> StatusMessage:
        try:
            await self.sessions.register(req.username, req.email, req.password)
        except ValidationError:
            return StatusMessage("Please fill in all fields", is_error=True)
        except AuthError as exc:
            return StatusMessage(f"Registration failed: {exc.message}", is_error=True)
        except TransportError as exc:
            return StatusMessage(f"Error: {exc.message}", is_error=True)
        return StatusMessage(
            "Registration successful! Please check your email to confirm your account."
        )

    async def login(self, req: LoginRequest) -> StatusMessage:
        try:
            await self.sessions.login(req.username, req.password)
        except ValidationError:
            return StatusMessage("Please enter username and password", is_error=True)
        except AuthError as exc:
            return StatusMessage(f"Login failed: {exc.message}", is_error=True)
        except TransportError as exc:
            return StatusMessage(f"Error: {exc.message}", is_error=True)
        return StatusMessage("Login successful!")

    def logout(self) -> StatusMessage:
        self.sessions.logout()
        return StatusMessage("Logged out successfully")

    async def confirm_email(self, token: str) -> StatusMessage:
        try:
            message = await self.sessions.confirm_email(token)
        except ValidationError:
            return StatusMessage("Missing confirmation token", is_error=True)
        except AuthError as exc:
            return StatusMessage(f"Confirmation failed: {exc.message}", is_error=True)
        except TransportError as exc:
            return StatusMessage(f"Error: {exc.message}", is_error=True)
        return StatusMessage(message or "Email confirmed")

    async def generate_world(self, req: WorldRequest) -> WorldResult:
        try:
            text = await self.world.fetch_world(req.seed, req.width, req.height)
        except FetchError as exc:
            return WorldResult(exc.message, is_error=True)
        return WorldResult(text)

    def load_fallback(self) -> WorldResult:
        try:
            text = self.world.load_fallback()
        except FetchError as exc:
            return WorldResult(exc.message, is_error=True)
        return WorldResult(text)


def build_actions(
    *,
    config: ClientConfig,
    store: SessionStore,
    http: httpx.AsyncClient,
    fallback_path: Path,
) -> Actions:
    auth = AuthService(http, config.services.auth_base_url)
    sessions = SessionManager(store, auth, ttl=timedelta(days=config.session.ttl_days))
    world = WorldClient(
        http,
        config.services.world_base_url,
        sessions,
        fallback_path=fallback_path,
    )
    return Actions(sessions, world)
