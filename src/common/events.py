from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, TypeAlias

if TYPE_CHECKING:
    from smartbot.messages import Message


@dataclass(frozen=True, slots=True)
class PendingChangedEvent:
    pending: bool


@dataclass(frozen=True, slots=True)
class MessageAppendedEvent:
    message: Message


@dataclass(frozen=True, slots=True)
class MessageEditedEvent:
    message: Message


@dataclass(frozen=True, slots=True)
class ConversationResetEvent:
    reason: str
    session_id: str | None = None


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    message: str
    source: str | None = None
    detail: Any = None


Event: TypeAlias = (
    PendingChangedEvent
    | MessageAppendedEvent
    | MessageEditedEvent
    | ConversationResetEvent
    | ErrorEvent
)
EventCallback: TypeAlias = Callable[[Event], None] | None


class EventEmitter:
    def __init__(self, callback: EventCallback = None):
        self._callback = callback

    def emit(self, event: Event) -> None:
        if self._callback is not None:
            self._callback(event)
