from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from common.ids import generate_id


def display_time(moment: datetime | None = None) -> str:
    return (moment or datetime.now()).strftime("%H:%M")


def display_datetime(moment: datetime | None = None) -> str:
    return (moment or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")


class Sender(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Attachment(BaseModel):
    name: str
    size: int = Field(ge=0)


class Message(BaseModel):
    id: str = Field(default_factory=generate_id)
    text: str
    sender: Sender
    timestamp: str = Field(default_factory=display_time)
    edited: bool = False
    attachment: Attachment | None = None

    @model_validator(mode="after")
    def _user_only_fields(self) -> "Message":
        if self.sender != Sender.USER:
            if self.edited:
                raise ValueError("only user messages can be marked edited")
            if self.attachment is not None:
                raise ValueError("only user messages can carry an attachment")
        return self

    @property
    def is_user(self) -> bool:
        return self.sender == Sender.USER

    @property
    def is_assistant(self) -> bool:
        return self.sender == Sender.ASSISTANT


def user_message(text: str, attachment: Attachment | None = None) -> Message:
    return Message(text=text, sender=Sender.USER, attachment=attachment)


def assistant_message(text: str, message_id: str | None = None) -> Message:
    if message_id is None:
        return Message(text=text, sender=Sender.ASSISTANT)
    return Message(id=message_id, text=text, sender=Sender.ASSISTANT)
