from __future__ import annotations

import logging

from common import llm
from smartbot.gateway.base import GatewayFailure, UploadResult
from smartbot.prompts import CHAT_SYSTEM_PROMPT, STRUCTURED_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class LiteLLMGateway:
    """Completes prompts directly against a model; has no upload backend."""

    def __init__(
        self,
        model: str,
        *,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        timeout_s: float | None = None,
        completion_fn=None,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_s = timeout_s
        self.completion_fn = completion_fn or llm.acompletion

    def build_messages(self, message: str, structured: bool) -> list[dict]:
        system_prompt = STRUCTURED_SYSTEM_PROMPT if structured else CHAT_SYSTEM_PROMPT
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": message},
        ]

    async def complete(self, message: str, structured: bool = False) -> str:
        try:
            response = await self.completion_fn(
                model=self.model,
                messages=self.build_messages(message, structured),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                timeout=self.timeout_s,
            )
        except Exception as e:
            logger.warning(f"Completion with {self.model} failed: {e}")
            raise GatewayFailure(f"Completion failed: {e}") from e

        text = llm.response_text(response)
        if not text:
            raise GatewayFailure("Model returned an empty reply")
        return text

    async def upload(
        self,
        filename: str,
        content: bytes,
        content_type: str | None = None,
    ) -> UploadResult:
        raise GatewayFailure("File uploads require the HTTP gateway (set SMARTBOT_API_URL)")
