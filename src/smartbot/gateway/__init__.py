from smartbot.gateway.base import (
    ChatReply,
    GatewayFailure,
    ResponseGateway,
    UploadedFile,
    UploadResult,
)
from smartbot.gateway.http_gateway import HttpGateway
from smartbot.gateway.llm import LiteLLMGateway

__all__ = [
    "ChatReply",
    "GatewayFailure",
    "HttpGateway",
    "LiteLLMGateway",
    "ResponseGateway",
    "UploadResult",
    "UploadedFile",
    "build_gateway",
]


def build_gateway(config) -> ResponseGateway:
    if config.uses_http_gateway:
        return HttpGateway(
            config.gateway.api_url,
            token=config.gateway.api_token,
            timeout_s=config.gateway.timeout_s,
        )
    return LiteLLMGateway(
        config.llm.model,
        temperature=config.llm.temperature,
        max_tokens=config.llm.max_tokens,
        timeout_s=config.gateway.timeout_s,
    )
