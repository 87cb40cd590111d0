from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ClientPaths:
    home: Path
    config_dir: Path
    logs_dir: Path
    data_dir: Path

    @property
    def client_config_path(self) -> Path:
        return self.config_dir / "client.json"

    @property
    def session_path(self) -> Path:
        return self.data_dir / "session.json"


def resolve_client_home(environ: dict[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ

    raw = (env.get("ASCIIMMO_HOME") or "").strip()
    if raw:
        candidate = Path(raw).expanduser()
        # Relative values are anchored to the user's home, never the CWD.
        if not candidate.is_absolute():
            candidate = (Path.home() / candidate).resolve()
        else:
            candidate = candidate.resolve()
        return candidate

    def default_home() -> Path:
        if sys.platform.startswith("win"):
            base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
            if base:
                return Path(base) / "asciimmo"
            return Path.home() / "AppData" / "Local" / "asciimmo"

        if sys.platform == "darwin":
            return Path.home() / "Library" / "Application Support" / "asciimmo"

        xdg = os.environ.get("XDG_DATA_HOME")
        if xdg:
            return Path(xdg) / "asciimmo"
        return Path.home() / ".local" / "share" / "asciimmo"

    return default_home().resolve()


def ensure_client_layout(home: Path) -> ClientPaths:
    home.mkdir(parents=True, exist_ok=True)

    config_dir = home / "config"
    logs_dir = home / "logs"
    data_dir = home / "data"

    for path in (config_dir, logs_dir, data_dir):
        path.mkdir(parents=True, exist_ok=True)

    return ClientPaths(
        home=home,
        config_dir=config_dir,
        logs_dir=logs_dir,
        data_dir=data_dir,
    )
