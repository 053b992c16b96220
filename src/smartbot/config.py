import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


MODEL_ALIASES = {
    "sonnet": "claude-sonnet-4-20250514",
    "opus": "claude-opus-4-20250514",
    "haiku": "claude-3-5-haiku-20241022",
    "4o": "gpt-4o",
    "4o-mini": "gpt-4o-mini",
    "flash": "gemini/gemini-2.5-flash",
    "deepseek": "deepseek/deepseek-chat",
}

DEFAULT_HISTORY_LIMIT = 20
HISTORY_KEY = "chatHistory"


class ConfigError(Exception):
    pass


def resolve_model_alias(name: str) -> str:
    return MODEL_ALIASES.get(name.lower(), name)


def get_optional_env(name: str, default: str) -> str:
    return os.environ.get(name, default)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


@dataclass
class GatewayConfig:
    api_url: str | None = field(
        default_factory=lambda: os.environ.get("SMARTBOT_API_URL") or None
    )
    api_token: str | None = field(
        default_factory=lambda: os.environ.get("SMARTBOT_API_TOKEN") or None
    )
    timeout_s: float = field(default_factory=lambda: _env_float("SMARTBOT_TIMEOUT", 60.0))


@dataclass
class LLMConfig:
    model: str = field(
        default_factory=lambda: resolve_model_alias(get_optional_env("SMARTBOT_MODEL", "gpt-4o"))
    )
    temperature: float = field(
        default_factory=lambda: _env_float("SMARTBOT_TEMPERATURE", 0.7)
    )
    max_tokens: int = field(default_factory=lambda: _env_int("SMARTBOT_MAX_TOKENS", 4096))


@dataclass
class ChatConfig:
    history_dir: str = field(
        default_factory=lambda: get_optional_env("SMARTBOT_HISTORY_DIR", ".smartbot")
    )
    history_limit: int = field(
        default_factory=lambda: _env_int("SMARTBOT_HISTORY_LIMIT", DEFAULT_HISTORY_LIMIT)
    )
    history_key: str = HISTORY_KEY
    ephemeral: bool = False
    gateway: GatewayConfig = field(default_factory=GatewayConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)

    @classmethod
    def from_env(cls, **overrides) -> "ChatConfig":
        config = cls()
        for key, value in overrides.items():
            if value is None:
                continue
            if key == "model":
                config.llm.model = resolve_model_alias(value)
            elif key == "api_url":
                config.gateway.api_url = value
            else:
                setattr(config, key, value)
        return config

    @property
    def uses_http_gateway(self) -> bool:
        return bool(self.gateway.api_url)

    def validate(self) -> None:
        if not 10 <= self.history_limit <= 20:
            raise ConfigError("history_limit must be between 10 and 20")
        if not self.history_key:
            raise ConfigError("history_key must not be empty")
        if self.gateway.timeout_s <= 0:
            raise ConfigError("timeout must be > 0")
        if not 0.0 <= self.llm.temperature <= 2.0:
            raise ConfigError("temperature must be between 0 and 2")
        if self.llm.max_tokens < 1:
            raise ConfigError("max_tokens must be at least 1")
        if self.gateway.api_url and not self.gateway.api_url.startswith(("http://", "https://")):
            raise ConfigError(f"Invalid API URL: {self.gateway.api_url}")
        logger.debug("Configuration validated successfully")
