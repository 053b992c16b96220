import logging
from pathlib import Path

from common.events import EventCallback
from smartbot.config import ChatConfig
from smartbot.controller import ConversationController
from smartbot.gateway import ResponseGateway, build_gateway
from smartbot.sessions.archive import SessionArchive
from smartbot.sessions.store import HistoryStore, JsonHistoryStore, MemoryHistoryStore
from smartbot.speech import CommandSynthesizer, SpeechRecognizer, SpeechSynthesizer

logger = logging.getLogger(__name__)


def build_store(config: ChatConfig) -> HistoryStore:
    if config.ephemeral:
        return MemoryHistoryStore()
    return JsonHistoryStore(Path(config.history_dir))


def build_archive(config: ChatConfig, store: HistoryStore | None = None) -> SessionArchive:
    return SessionArchive(
        store or build_store(config),
        key=config.history_key,
        limit=config.history_limit,
    )


class ChatRuntime:
    def __init__(
        self,
        config: ChatConfig | None = None,
        *,
        gateway: ResponseGateway | None = None,
        store: HistoryStore | None = None,
        recognizer: SpeechRecognizer | None = None,
        synthesizer: SpeechSynthesizer | None = None,
        on_event: EventCallback = None,
    ):
        self.config = config or ChatConfig()
        self.config.validate()
        self.store = store or build_store(self.config)
        self.archive = build_archive(self.config, self.store)
        self.gateway = gateway or build_gateway(self.config)
        if synthesizer is None:
            synthesizer = CommandSynthesizer.detect()
        self.controller = ConversationController(
            self.gateway,
            self.archive,
            recognizer=recognizer,
            synthesizer=synthesizer,
            on_event=on_event,
        )
        logger.info(
            f"Chat runtime ready (gateway={type(self.gateway).__name__}, "
            f"archived sessions={len(self.archive)})"
        )

    @property
    def gateway_label(self) -> str:
        if self.config.uses_http_gateway:
            return self.config.gateway.api_url or ""
        return self.config.llm.model

    async def aclose(self) -> None:
        close = getattr(self.gateway, "aclose", None)
        if close is not None:
            await close()
