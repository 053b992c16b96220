"""Bounded, most-recent-first history of archived conversations."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import overload

from smartbot.config import DEFAULT_HISTORY_LIMIT, HISTORY_KEY
from smartbot.messages import Message
from smartbot.sessions.schema import Session
from smartbot.sessions.store import HistoryStore, HistoryStoreError

logger = logging.getLogger(__name__)


class ArchiveUnavailable(Exception):
    """Persisting the archive failed; the in-memory change has been kept."""

    def __init__(self, message: str, session_id: str | None = None):
        super().__init__(message)
        self.session_id = session_id


class SessionListing(Sequence[Session]):
    """Read-only view over the archive as it was when ``list()`` was called.

    Items are copied on access, so callers cannot reach archived state.
    Iterating again restarts from the most recent session.
    """

    def __init__(self, sessions: tuple[Session, ...]):
        self._sessions = sessions

    @overload
    def __getitem__(self, index: int) -> Session: ...

    @overload
    def __getitem__(self, index: slice) -> list[Session]: ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [s.model_copy(deep=True) for s in self._sessions[index]]
        return self._sessions[index].model_copy(deep=True)

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[Session]:
        for session in self._sessions:
            yield session.model_copy(deep=True)

    def ids(self) -> list[str]:
        return [s.id for s in self._sessions]


class SessionArchive:
    def __init__(
        self,
        store: HistoryStore,
        key: str = HISTORY_KEY,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.store = store
        self.key = key
        self.limit = limit
        self._sessions: tuple[Session, ...] = self._load()

    def _load(self) -> tuple[Session, ...]:
        try:
            sessions = self.store.load(self.key)
        except HistoryStoreError:
            logger.exception("Failed to load chat history; starting empty")
            return ()
        logger.info(f"Loaded {len(sessions)} archived sessions")
        return tuple(sessions[: self.limit])

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return any(s.id == session_id for s in self._sessions)

    def get(self, session_id: str) -> Session | None:
        for session in self._sessions:
            if session.id == session_id:
                return session.model_copy(deep=True)
        return None

    def list(self) -> SessionListing:
        return SessionListing(self._sessions)

    def archive(self, messages: Iterable[Message]) -> str:
        session = Session.from_messages(messages)
        updated = (session,) + self._sessions
        evicted = updated[self.limit :]
        self._commit(updated[: self.limit])
        if evicted:
            logger.debug(f"Evicted {len(evicted)} sessions beyond limit {self.limit}")
        logger.info(f"Archived session {session.id} ({session.title!r})")
        self._persist(session_id=session.id)
        return session.id

    def delete(self, session_id: str) -> bool:
        if session_id not in self:
            return False
        self._commit(tuple(s for s in self._sessions if s.id != session_id))
        logger.info(f"Deleted session {session_id}")
        self._persist()
        return True

    def clear(self) -> None:
        self._commit(())
        logger.info("Cleared chat history")
        self._persist()

    def _commit(self, sessions: tuple[Session, ...]) -> None:
        self._sessions = sessions

    def _persist(self, session_id: str | None = None) -> None:
        try:
            self.store.save(self.key, self._sessions)
        except HistoryStoreError as e:
            logger.exception("Failed to persist chat history")
            raise ArchiveUnavailable(str(e), session_id=session_id) from e
