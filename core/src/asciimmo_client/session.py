from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Final

from asciimmo_client.errors import ValidationError
from asciimmo_client.services import AuthService
from asciimmo_client.storage import SessionStore

logger = logging.getLogger(__name__)

SESSION_TOKEN_KEY: Final[str] = "session_token"
USERNAME_KEY: Final[str] = "username"
DEFAULT_SESSION_TTL: Final[timedelta] = timedelta(days=30)


@dataclass(frozen=True)
class Session:
    token: str
    username: str


def _require(**fields: str) -> None:
    missing = [name for name, value in fields.items() if not value]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")


class SessionManager:
    """Owns the caller's authentication session.

    The persisted pair (``session_token``, ``username``) is always written and
    cleared together. ``current_session()`` is the cached value UIs bind to; it
    is loaded from the store once at construction and then follows
    ``login``/``logout``.

    Concurrent logins are not serialized: state is updated after each response
    arrives, so the last one to resolve wins.
    """

    def __init__(
        self,
        store: SessionStore,
        auth: AuthService,
        *,
        ttl: timedelta = DEFAULT_SESSION_TTL,
    ) -> None:
        self._store = store
        self._auth = auth
        self._ttl = ttl
        self._current = self.load_session()

    def load_session(self) -> Session | None:
        token = self._store.get(SESSION_TOKEN_KEY)
        username = self._store.get(USERNAME_KEY)
        if not token or not username:
            return None
        return Session(token=token, username=username)

    def current_session(self) -> Session | None:
        return self._current

    def persist(self, session: Session) -> None:
        self._store.set_many(
            {SESSION_TOKEN_KEY: session.token, USERNAME_KEY: session.username},
            self._ttl,
        )
        self._current = session

    async def login(self, username: str, password: str) -> Session:
        """Exchange credentials for a session and persist it.

        Raises ValidationError (no network call), AuthError or TransportError.
        """

        _require(username=username, password=password)
        token = await self._auth.login(username, password)
        session = Session(token=token, username=username)
        self.persist(session)
        logger.info("Logged in as %s", username)
        return session

    async def register(self, username: str, email: str, password: str) -> None:
        """Create an account. The account must be confirmed by email before login."""

        _require(username=username, email=email, password=password)
        await self._auth.register(username, email, password)
        logger.info("Registered %s", username)

    async def confirm_email(self, token: str) -> str:
        _require(token=token)
        return await self._auth.confirm_email(token)

    def logout(self) -> None:
        self._store.delete_many((SESSION_TOKEN_KEY, USERNAME_KEY))
        if self._current is not None:
            logger.info("Logged out %s", self._current.username)
        self._current = None
