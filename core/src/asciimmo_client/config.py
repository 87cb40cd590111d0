from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from asciimmo_client.home import ClientPaths


class ServicesConfig(BaseModel):
    auth_base_url: str = Field(default="https://localhost:8081")
    world_base_url: str = Field(default="https://localhost:8080")
    verify_tls: bool = Field(
        default=False,
        description="The demo services ship self-signed certificates, so verification is off.",
    )
    timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Per-request timeout; omitted means requests wait until they finish.",
    )


class SessionConfig(BaseModel):
    ttl_days: int = Field(
        default=30, ge=1, description="Lifetime of persisted session entries from last write."
    )


class UIConfig(BaseModel):
    bind_host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000, ge=1, le=65535)


class WorldConfig(BaseModel):
    fallback_path: str | None = Field(
        default=None,
        description=(
            "Map text written by the CLI generator; if relative, resolved under "
            "ASCIIMMO_HOME. Defaults to ASCIIMMO_HOME/data/world.txt."
        ),
    )


class LoggingConfig(BaseModel):
    max_size_mb: int = Field(
        default=10, ge=1, description="Max size of a log file in MB before rolling."
    )
    backup_count: int = Field(default=5, ge=1, description="Number of log archives to keep.")


class ClientConfig(BaseModel):
    version: str = Field(default="1")
    services: ServicesConfig = Field(default_factory=ServicesConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    world: WorldConfig = Field(default_factory=WorldConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _read_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_client_config(paths: ClientPaths) -> ClientConfig:
    """Load config from ${ASCIIMMO_HOME}/config/client.json.

    - If missing: returns defaults.
    - Validation is performed by Pydantic.
    """

    config_path = paths.client_config_path
    if not config_path.exists():
        return ClientConfig()

    raw = _read_json(config_path)
    return ClientConfig.model_validate(raw)


def write_client_config(paths: ClientPaths, config: ClientConfig) -> None:
    """Persist config to ${ASCIIMMO_HOME}/config/client.json."""

    payload = config.model_dump(mode="json", exclude_none=True)
    paths.config_dir.mkdir(parents=True, exist_ok=True)
    paths.client_config_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def resolve_fallback_path(paths: ClientPaths, config: ClientConfig) -> Path:
    raw = config.world.fallback_path
    if raw is None or not str(raw).strip():
        return paths.data_dir / "world.txt"
    candidate = Path(raw).expanduser()
    if not candidate.is_absolute():
        candidate = (paths.home / candidate).resolve()
    return candidate
