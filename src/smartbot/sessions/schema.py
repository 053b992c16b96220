from collections.abc import Iterable

from pydantic import BaseModel, Field

from common.ids import generate_id
from smartbot.messages import Message, display_datetime

TITLE_MAX_CHARS = 30
TITLE_ELLIPSIS = "..."
DEFAULT_TITLE = "Conversation"


def derive_title(messages: Iterable[Message], max_chars: int = TITLE_MAX_CHARS) -> str:
    for message in messages:
        if message.is_user:
            text = message.text
            if len(text) > max_chars:
                return text[:max_chars] + TITLE_ELLIPSIS
            return text
    return DEFAULT_TITLE


class Session(BaseModel):
    id: str = Field(default_factory=generate_id)
    title: str = DEFAULT_TITLE
    created_at: str = Field(default_factory=display_datetime)
    messages: list[Message] = Field(default_factory=list)

    @classmethod
    def from_messages(cls, messages: Iterable[Message]) -> "Session":
        snapshot = [m.model_copy(deep=True) for m in messages]
        return cls(title=derive_title(snapshot), messages=snapshot)
