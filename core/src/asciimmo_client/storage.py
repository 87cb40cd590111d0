from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


class SessionStore(Protocol):
    """Durable string entries with a per-entry time-to-live.

    Expired entries read as absent. ``set_many`` and ``delete_many`` apply to
    all named entries in one operation.
    """

    def get(self, name: str) -> str | None: ...

    def set_many(self, values: Mapping[str, str], ttl: timedelta) -> None: ...

    def delete_many(self, names: Iterable[str]) -> None: ...


@dataclass(frozen=True)
class StoredEntry:
    value: str
    expires_at: datetime

    def is_live(self, now: datetime) -> bool:
        return now < self.expires_at


class MemoryStore:
    """In-process store, mainly for tests and short-lived scripts."""

    def __init__(self, *, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._entries: dict[str, StoredEntry] = {}

    def get(self, name: str) -> str | None:
        entry = self._entries.get(name)
        if entry is None:
            return None
        if not entry.is_live(self._clock()):
            del self._entries[name]
            return None
        return entry.value

    def set_many(self, values: Mapping[str, str], ttl: timedelta) -> None:
        expires_at = self._clock() + ttl
        self._entries.update(
            {name: StoredEntry(value=value, expires_at=expires_at) for name, value in values.items()}
        )

    def delete_many(self, names: Iterable[str]) -> None:
        for name in names:
            self._entries.pop(name, None)


class FileStore:
    """JSON document on disk, one ``{value, expires_at}`` object per entry.

    File: ${ASCIIMMO_HOME}/data/session.json

    A missing or unreadable document reads as empty. Writes go to a sibling
    temp file which then replaces the document.
    """

    def __init__(self, path: Path, *, clock: Clock = utc_now) -> None:
        self._path = path
        self._clock = clock

    @property
    def path(self) -> Path:
        return self._path

    def get(self, name: str) -> str | None:
        raw = self._read().get(name)
        if not isinstance(raw, dict):
            return None
        try:
            entry = StoredEntry(
                value=str(raw["value"]),
                expires_at=datetime.fromisoformat(str(raw["expires_at"])),
            )
        except (KeyError, ValueError):
            entry = None
        # Expiry must be timezone-aware to compare against the clock.
        if entry is None or entry.expires_at.tzinfo is None:
            logger.warning("Ignoring malformed session entry %r in %s", name, self._path)
            return None
        if not entry.is_live(self._clock()):
            return None
        return entry.value

    def set_many(self, values: Mapping[str, str], ttl: timedelta) -> None:
        expires_at = (self._clock() + ttl).isoformat()
        doc = self._read()
        for name, value in values.items():
            doc[name] = {"value": value, "expires_at": expires_at}
        self._write(doc)

    def delete_many(self, names: Iterable[str]) -> None:
        doc = self._read()
        changed = False
        for name in names:
            if doc.pop(name, None) is not None:
                changed = True
        if changed:
            self._write(doc)

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            logger.warning("Session file %s is unreadable; treating as empty", self._path)
            return {}
        if not isinstance(data, dict):
            return {}
        return data

    def _write(self, doc: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(doc, f, indent=2, sort_keys=True)
                f.write("\n")
            tmp.replace(self._path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise

        # Session tokens are credentials.
        try:
            os.chmod(self._path, 0o600)
        except OSError:
            pass
