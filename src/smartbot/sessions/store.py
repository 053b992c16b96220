"""Persistence port for the archived session collection."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import ValidationError

from common.jsonio import atomic_write_json, load_json
from smartbot.sessions.schema import Session

logger = logging.getLogger(__name__)


class HistoryStoreError(Exception):
    pass


@runtime_checkable
class HistoryStore(Protocol):
    def load(self, key: str) -> list[Session]:
        """Return the stored collection for *key*, or an empty list."""
        ...

    def save(self, key: str, sessions: Sequence[Session]) -> None:
        """Replace the stored collection for *key*; raise HistoryStoreError on failure."""
        ...


def serialize_sessions(sessions: Sequence[Session]) -> list[dict[str, Any]]:
    return [session.model_dump(mode="json") for session in sessions]


def deserialize_sessions(payload: Any) -> list[Session]:
    if not isinstance(payload, list):
        if payload is not None:
            logger.warning(f"Ignoring stored history of type {type(payload).__name__}")
        return []
    sessions: list[Session] = []
    for index, item in enumerate(payload):
        try:
            sessions.append(Session.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping invalid stored session at position {index}: {e}")
    return sessions


class JsonHistoryStore:
    def __init__(self, root_dir: str | Path):
        self.root_dir = Path(root_dir)

    def path_for(self, key: str) -> Path:
        return self.root_dir / f"{key}.json"

    def load(self, key: str) -> list[Session]:
        try:
            payload = load_json(self.path_for(key))
        except OSError as e:
            raise HistoryStoreError(f"Cannot read {self.path_for(key)}: {e}") from e
        return deserialize_sessions(payload)

    def save(self, key: str, sessions: Sequence[Session]) -> None:
        path = self.path_for(key)
        try:
            atomic_write_json(path, serialize_sessions(sessions))
        except (OSError, TypeError, ValueError) as e:
            raise HistoryStoreError(f"Cannot write {path}: {e}") from e
        logger.debug(f"Saved {len(sessions)} sessions to {path}")


class MemoryHistoryStore:
    """Keeps serialized payloads in process, so loads never alias saved objects."""

    def __init__(self):
        self._data: dict[str, str] = {}

    def load(self, key: str) -> list[Session]:
        raw = self._data.get(key)
        if raw is None:
            return []
        return deserialize_sessions(json.loads(raw))

    def save(self, key: str, sessions: Sequence[Session]) -> None:
        self._data[key] = json.dumps(serialize_sessions(sessions))

    def raw(self, key: str) -> str | None:
        return self._data.get(key)
