import asyncio
from collections.abc import Sequence

import pytest

from smartbot.controller import ConversationController
from smartbot.gateway.base import GatewayFailure, UploadedFile, UploadResult
from smartbot.sessions.archive import SessionArchive
from smartbot.sessions.schema import Session
from smartbot.sessions.store import HistoryStoreError, MemoryHistoryStore


class FakeGateway:
    def __init__(self, replies: list[str] | None = None):
        self.replies = list(replies or [])
        self.calls: list[tuple[str, bool]] = []
        self.uploads: list[tuple[str, bytes, str | None]] = []
        self.fail = False
        self.fail_uploads = False
        self._counter = 0

    async def complete(self, message: str, structured: bool = False) -> str:
        self.calls.append((message, structured))
        if self.fail:
            raise GatewayFailure("service unavailable", status_code=503)
        if self.replies:
            return self.replies.pop(0)
        self._counter += 1
        return f"reply {self._counter} to {message}"

    async def upload(self, filename: str, content: bytes, content_type: str | None = None) -> UploadResult:
        self.uploads.append((filename, content, content_type))
        if self.fail_uploads:
            raise GatewayFailure("upload rejected", status_code=401)
        return UploadResult(
            success=True,
            file=UploadedFile(
                filename=f"1700000000-{filename}",
                original_name=filename,
                uploaded_by="user-1",
                uploaded_at="2024-01-01T00:00:00Z",
            ),
        )


class BlockingGateway(FakeGateway):
    """Holds every completion until ``release`` is set."""

    def __init__(self, replies: list[str] | None = None):
        super().__init__(replies)
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def complete(self, message: str, structured: bool = False) -> str:
        self.started.set()
        await self.release.wait()
        return await super().complete(message, structured)


class FailingStore(MemoryHistoryStore):
    def __init__(self):
        super().__init__()
        self.fail_saves = True

    def save(self, key: str, sessions: Sequence[Session]) -> None:
        if self.fail_saves:
            raise HistoryStoreError("disk full")
        super().save(key, sessions)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def store():
    return MemoryHistoryStore()


@pytest.fixture
def archive(store):
    return SessionArchive(store, limit=20)


@pytest.fixture
def events():
    return []


@pytest.fixture
def controller(gateway, archive, events):
    return ConversationController(gateway, archive, on_event=events.append)


def run(coro):
    return asyncio.run(coro)
