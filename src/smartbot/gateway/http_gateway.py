"""Response gateway backed by the chat web service."""

from __future__ import annotations

import logging
import mimetypes
from typing import Any

import httpx
from pydantic import ValidationError

from smartbot.gateway.base import ChatReply, GatewayFailure, UploadResult

logger = logging.getLogger(__name__)


CHAT_PATH = "/api/chat"
UPLOAD_PATH = "/api/uploads"


class HttpGateway:
    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        cookies: dict[str, str] | None = None,
        timeout_s: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.cookies = dict(cookies or {})
        self.timeout_s = timeout_s
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Accept": "application/json", "User-Agent": "smartbot/0.1"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                cookies=self.cookies,
                timeout=self.timeout_s,
                transport=self._transport,
                follow_redirects=True,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def complete(self, message: str, structured: bool = False) -> str:
        data = await self._post_json(
            CHAT_PATH, json={"message": message, "structured": structured}
        )
        try:
            return ChatReply.model_validate(data).reply
        except ValidationError as e:
            raise GatewayFailure(f"Malformed chat response: {e}") from e

    async def upload(
        self,
        filename: str,
        content: bytes,
        content_type: str | None = None,
    ) -> UploadResult:
        content_type = (
            content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
        )
        data = await self._post_json(
            UPLOAD_PATH, files={"file": (filename, content, content_type)}
        )
        try:
            result = UploadResult.model_validate(data)
        except ValidationError as e:
            raise GatewayFailure(f"Malformed upload response: {e}") from e
        if not result.success:
            raise GatewayFailure(f"Upload of {filename} was rejected")
        return result

    async def _post_json(self, path: str, **kwargs) -> Any:
        try:
            response = await self.client.post(path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning(f"POST {path} failed with status {status}")
            raise GatewayFailure(
                f"{path} returned HTTP {status}", status_code=status
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"POST {path} failed: {e}")
            raise GatewayFailure(f"{path} request failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise GatewayFailure(f"{path} returned invalid JSON") from e
