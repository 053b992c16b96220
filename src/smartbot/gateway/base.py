from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


class GatewayFailure(Exception):
    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UploadedFile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    filename: str
    original_name: str = Field(alias="originalName")
    uploaded_by: str | None = Field(default=None, alias="uploadedBy")
    uploaded_at: str | None = Field(default=None, alias="uploadedAt")


class UploadResult(BaseModel):
    success: bool
    file: UploadedFile


class ChatReply(BaseModel):
    reply: str


@runtime_checkable
class ResponseGateway(Protocol):
    async def complete(self, message: str, structured: bool = False) -> str:
        """Return the assistant reply for *message*; raise GatewayFailure on any error."""
        ...

    async def upload(
        self,
        filename: str,
        content: bytes,
        content_type: str | None = None,
    ) -> UploadResult:
        """Upload a named binary payload; raise GatewayFailure on any error."""
        ...
