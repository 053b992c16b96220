"""Ordered, mutable list of turns for the active conversation."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from smartbot.messages import Message, display_time


class MessageLogError(Exception):
    pass


class DuplicateIdError(MessageLogError):
    def __init__(self, message_id: str):
        super().__init__(f"Message id already present: {message_id}")
        self.message_id = message_id


class MessageNotFoundError(MessageLogError):
    def __init__(self, message_id: str):
        super().__init__(f"Message not found: {message_id}")
        self.message_id = message_id


class NotEditableError(MessageLogError):
    def __init__(self, message_id: str):
        super().__init__(f"Only user messages can be edited: {message_id}")
        self.message_id = message_id


class MessageLog:
    """Canonical conversation order is insertion order.

    Ids are unique within one log; lookups go through ``_index_of`` so the
    position of a turn is always resolved from the current contents.
    """

    def __init__(self, messages: Iterable[Message] | None = None):
        self._messages: list[Message] = []
        for message in messages or ():
            self.append(message)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __contains__(self, message_id: object) -> bool:
        return any(m.id == message_id for m in self._messages)

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    def get(self, message_id: str) -> Message:
        return self._messages[self._index_of(message_id)]

    def append(self, message: Message) -> Message:
        if message.id in self:
            raise DuplicateIdError(message.id)
        self._messages.append(message)
        return message

    def replace_text(self, message_id: str, new_text: str) -> Message:
        index = self._index_of(message_id)
        current = self._messages[index]
        if not current.is_user:
            raise NotEditableError(message_id)
        updated = current.model_copy(
            update={"text": new_text, "edited": True, "timestamp": display_time()}
        )
        self._messages[index] = updated
        return updated

    def truncate_after(self, message_id: str, inclusive: bool = False) -> list[Message]:
        index = self._index_of(message_id)
        cut = index if inclusive else index + 1
        removed = self._messages[cut:]
        del self._messages[cut:]
        return removed

    def find_last_user_before(self, message_id: str) -> Message | None:
        index = self._index_of(message_id)
        for message in reversed(self._messages[:index]):
            if message.is_user:
                return message
        return None

    def first_user_message(self) -> Message | None:
        for message in self._messages:
            if message.is_user:
                return message
        return None

    def snapshot(self) -> list[Message]:
        return [m.model_copy(deep=True) for m in self._messages]

    def _index_of(self, message_id: str) -> int:
        for index, message in enumerate(self._messages):
            if message.id == message_id:
                return index
        raise MessageNotFoundError(message_id)
