from __future__ import annotations

import logging
from pathlib import Path

import httpx

from asciimmo_client.errors import FetchError
from asciimmo_client.services import describe_transport_failure
from asciimmo_client.session import SESSION_TOKEN_KEY, SessionManager

logger = logging.getLogger(__name__)

FALLBACK_HINT = (
    "As a fallback, run the CLI generator and save to world.txt, "
    "then load world.txt instead."
)


class WorldClient:
    """Fetches ASCII map text from the World Service.

    GET /world?seed=&width=&height=[&session_token=]

    Parameters are passed through as given; the service parses them and falls
    back to its own defaults. One request per call, no retries.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str,
        sessions: SessionManager,
        *,
        fallback_path: Path,
    ) -> None:
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._sessions = sessions
        self._fallback_path = fallback_path

    @property
    def fallback_path(self) -> Path:
        return self._fallback_path

    def build_params(self, seed: str, width: str, height: str) -> dict[str, str]:
        params = {"seed": seed, "width": width, "height": height}
        session = self._sessions.current_session()
        if session is not None:
            params[SESSION_TOKEN_KEY] = session.token
        return params

    async def fetch_world(self, seed: str, width: str, height: str) -> str:
        params = self.build_params(seed, width, height)
        try:
            resp = await self._http.get(f"{self._base_url}/world", params=params)
        except httpx.HTTPError as exc:
            logger.warning("GET /world failed: %s", describe_transport_failure(exc))
            raise FetchError(_fetch_failure(describe_transport_failure(exc))) from exc

        logger.info("GET /world - %s", resp.status_code)
        if not resp.is_success:
            raise FetchError(_fetch_failure(f"HTTP {resp.status_code}"))
        return resp.text

    def load_fallback(self) -> str:
        """Read the map text saved by the CLI generator."""

        try:
            return self._fallback_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Fallback map %s unavailable: %s", self._fallback_path, exc)
            reason = getattr(exc, "strerror", None) or str(exc)
            raise FetchError(f"Error loading world.txt: {reason}") from exc


def _fetch_failure(cause: str) -> str:
    return f"Error fetching /world: {cause}\n\n{FALLBACK_HINT}"
