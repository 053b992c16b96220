"""Conversation state machine.

One live ``MessageLog`` at a time, at most one gateway call in flight.
Every flow appends its user turn before suspending on the gateway, and
records the outcome in the log before ``pending`` is cleared.
"""

from __future__ import annotations

import asyncio
import logging

from common.events import (
    ConversationResetEvent,
    ErrorEvent,
    EventCallback,
    EventEmitter,
    MessageAppendedEvent,
    MessageEditedEvent,
    PendingChangedEvent,
)
from smartbot.gateway.base import GatewayFailure, ResponseGateway
from smartbot.message_log import MessageLog, NotEditableError
from smartbot.messages import Attachment, Message, assistant_message, user_message
from smartbot.prompts import (
    ASSISTANT_FAILED_TEXT,
    FRESH_GREETING_TEXT,
    SIMULATED_TRANSCRIPT,
    UPLOAD_FAILED_TEXT,
    WELCOME_MESSAGE_ID,
    WELCOME_TEXT,
    attachment_text,
    upload_succeeded_text,
)
from smartbot.sessions.archive import ArchiveUnavailable, SessionArchive
from smartbot.speech import SpeechRecognizer, SpeechSynthesizer

logger = logging.getLogger(__name__)


class ConversationBusy(Exception):
    def __init__(self, operation: str):
        super().__init__(f"Cannot {operation} while a response is pending")
        self.operation = operation


class ConversationController:
    def __init__(
        self,
        gateway: ResponseGateway,
        archive: SessionArchive,
        *,
        recognizer: SpeechRecognizer | None = None,
        synthesizer: SpeechSynthesizer | None = None,
        on_event: EventCallback = None,
        seed: bool = True,
    ):
        self.gateway = gateway
        self.archive = archive
        self.recognizer = recognizer
        self.synthesizer = synthesizer
        self.emitter = EventEmitter(on_event)
        self.seed = seed
        self.log = self._seeded_log(WELCOME_TEXT, message_id=WELCOME_MESSAGE_ID)
        self.active_session_id: str | None = None
        self._pending = False
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._pending

    @property
    def messages(self) -> list[Message]:
        return self.log.messages

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def has_conversation(self) -> bool:
        """True once the log holds more than its seed greeting."""
        return len(self.log) > (1 if self.seed else 0)

    # ------------------------------------------------------------------
    # Turn flows

    async def send(self, text: str) -> Message | None:
        return await self._send(text, structured=False)

    async def send_structured(self, text: str) -> Message | None:
        return await self._send(text, structured=True)

    async def _send(self, text: str, structured: bool) -> Message | None:
        if not text.strip():
            return None
        self._require_idle("send")
        self._append(user_message(text))
        return await self._respond(text, structured=structured)

    async def attach_file(
        self,
        filename: str,
        content: bytes,
        content_type: str | None = None,
    ) -> Message | None:
        self._require_idle("attach a file")
        attachment = Attachment(name=filename, size=len(content))
        self._append(user_message(attachment_text(filename), attachment=attachment))

        generation = self._begin()
        try:
            result = await self.gateway.upload(filename, content, content_type)
        except GatewayFailure as e:
            logger.warning(f"Upload of {filename} failed: {e}")
            text = UPLOAD_FAILED_TEXT
        except (Exception, asyncio.CancelledError):
            self._abort(generation)
            raise
        else:
            logger.info(f"Uploaded {filename} as {result.file.filename}")
            text = upload_succeeded_text(filename)
        return self._finish(generation, assistant_message(text))

    async def retry(self, message_id: str) -> Message | None:
        self._require_idle("retry")
        target = self.log.get(message_id)
        if target.is_user:
            prompt = target
        else:
            prompt = self.log.find_last_user_before(message_id)
            if prompt is None:
                logger.debug(f"No user prompt precedes {message_id}; nothing to retry")
                return None
        removed = self.log.truncate_after(prompt.id, inclusive=False)
        logger.debug(f"Regenerating from {prompt.id}, dropped {len(removed)} messages")
        return await self._respond(prompt.text, structured=False)

    async def edit(self, message_id: str, new_text: str) -> Message | None:
        if not new_text.strip():
            return None
        self._require_idle("edit")
        updated = self.log.replace_text(message_id, new_text)
        self.emitter.emit(MessageEditedEvent(message=updated))
        return await self.retry(message_id)

    async def _respond(self, prompt: str, structured: bool) -> Message | None:
        generation = self._begin()
        try:
            reply = await self.gateway.complete(prompt, structured)
        except GatewayFailure as e:
            logger.warning(f"Assistant failed to respond: {e}")
            text = ASSISTANT_FAILED_TEXT
        except (Exception, asyncio.CancelledError):
            self._abort(generation)
            raise
        else:
            text = reply
        return self._finish(generation, assistant_message(text))

    # ------------------------------------------------------------------
    # Conversation boundaries

    def start_new_conversation(self) -> str | None:
        session_id = None
        if self.has_conversation:
            if self._pending:
                logger.warning("Abandoning conversation with a pending response; not archived")
                self.emitter.emit(
                    ErrorEvent(
                        message="Pending response abandoned; conversation was not saved",
                        source="controller",
                    )
                )
            else:
                session_id = self._archive_current()
        self._reset(FRESH_GREETING_TEXT, reason="new")
        return session_id

    def clear_conversation(self) -> str | None:
        return self.start_new_conversation()

    def load_conversation(self, session_id: str) -> bool:
        session = self.archive.get(session_id)
        if session is None:
            logger.warning(f"Session {session_id} not found")
            return False
        self._replace_log(MessageLog(session.messages))
        self.active_session_id = session.id
        logger.info(f"Loaded session {session.id} ({len(session.messages)} messages)")
        self.emitter.emit(ConversationResetEvent(reason="load", session_id=session.id))
        return True

    def delete_session(self, session_id: str) -> bool:
        try:
            deleted = self.archive.delete(session_id)
        except ArchiveUnavailable as e:
            deleted = True
            self._report_archive_error(e)
        if deleted and self.active_session_id == session_id:
            self._reset(FRESH_GREETING_TEXT, reason="deleted")
        return deleted

    def clear_history(self) -> None:
        try:
            self.archive.clear()
        except ArchiveUnavailable as e:
            self._report_archive_error(e)
        self._reset(FRESH_GREETING_TEXT, reason="cleared")

    def _archive_current(self) -> str | None:
        try:
            return self.archive.archive(self.log.snapshot())
        except ArchiveUnavailable as e:
            self._report_archive_error(e)
            return e.session_id

    def _report_archive_error(self, error: ArchiveUnavailable) -> None:
        self.emitter.emit(
            ErrorEvent(message=f"Chat history could not be saved: {error}", source="archive")
        )

    def _seeded_log(self, greeting: str, message_id: str | None = None) -> MessageLog:
        if not self.seed:
            return MessageLog()
        return MessageLog([assistant_message(greeting, message_id=message_id)])

    def _reset(self, greeting: str, reason: str) -> None:
        self._replace_log(self._seeded_log(greeting))
        self.active_session_id = None
        self.emitter.emit(ConversationResetEvent(reason=reason))

    def _replace_log(self, log: MessageLog) -> None:
        self._generation += 1
        self.log = log
        self._set_pending(False)

    # ------------------------------------------------------------------
    # Speech and drafts

    async def transcribe(self) -> str | None:
        if self.recognizer is None:
            return SIMULATED_TRANSCRIPT
        try:
            return await self.recognizer.transcribe()
        except Exception as e:
            logger.warning(f"Speech recognition failed: {e}")
            return None

    def read_aloud(self, message_id: str) -> bool:
        message = self.log.get(message_id)
        if self.synthesizer is None:
            return False
        return self.synthesizer.speak(message.text)

    def reuse(self, message_id: str) -> str:
        message = self.log.get(message_id)
        if not message.is_user:
            raise NotEditableError(message_id)
        return message.text

    # ------------------------------------------------------------------
    # Pending discipline

    def _require_idle(self, operation: str) -> None:
        if self._pending:
            raise ConversationBusy(operation)

    def _begin(self) -> int:
        self._set_pending(True)
        return self._generation

    def _finish(self, generation: int, message: Message) -> Message | None:
        if generation != self._generation:
            logger.info("Discarding response for an abandoned conversation")
            return None
        self._append(message)
        self._set_pending(False)
        return message

    def _abort(self, generation: int) -> None:
        if generation == self._generation:
            self._set_pending(False)

    def _append(self, message: Message) -> Message:
        self.log.append(message)
        self.emitter.emit(MessageAppendedEvent(message=message))
        return message

    def _set_pending(self, pending: bool) -> None:
        if self._pending == pending:
            return
        self._pending = pending
        self.emitter.emit(PendingChangedEvent(pending=pending))
