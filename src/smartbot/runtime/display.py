from common.events import (
    ConversationResetEvent,
    ErrorEvent,
    Event,
    MessageAppendedEvent,
    MessageEditedEvent,
    PendingChangedEvent,
)
from smartbot.messages import Message


def format_message(message: Message, index: int | None = None) -> str:
    icon = "👤" if message.is_user else "🤖"
    prefix = f"[{index}] " if index is not None else ""
    suffix = " (edited)" if message.edited else ""
    text = f"{prefix}{icon} {message.timestamp}{suffix}: {message.text}"
    if message.attachment is not None:
        text += f"\n    📎 {message.attachment.name} ({message.attachment.size} bytes)"
    return text


class EventPrinter:
    def __init__(self, echo_user: bool = False):
        self.echo_user = echo_user

    def __call__(self, event: Event) -> None:
        if isinstance(event, PendingChangedEvent):
            if event.pending:
                print("🤖 Typing...", flush=True)
            return
        if isinstance(event, MessageAppendedEvent):
            if event.message.is_assistant or self.echo_user:
                print(f"\n{format_message(event.message)}")
            return
        if isinstance(event, MessageEditedEvent):
            print(f"✏️  Edited: {event.message.text}")
            return
        if isinstance(event, ConversationResetEvent):
            if event.reason == "load":
                print(f"📂 Loaded conversation {event.session_id}")
            return
        if isinstance(event, ErrorEvent):
            print(f"⚠️  {event.message}")
            return
