import mimetypes
from pathlib import Path

from smartbot.message_log import MessageLogError
from smartbot.messages import Message
from smartbot.prompts import BIG_PROMPT_TEMPLATE, QUICK_PROMPTS
from smartbot.runtime.display import format_message
from smartbot.runtime.router import ALIASES
from smartbot.sessions.schema import Session


class BuiltinCommands:
    def __init__(self, runtime, repl=None):
        self.runtime = runtime
        self.repl = repl
        self._handlers = {
            "quit": self.cmd_quit,
            "exit": self.cmd_quit,
            "help": self.cmd_help,
            "messages": self.cmd_messages,
            "new": self.cmd_new,
            "clear": self.cmd_clear,
            "history": self.cmd_history,
            "load": self.cmd_load,
            "delete": self.cmd_delete,
            "clear-history": self.cmd_clear_history,
            "retry": self.cmd_retry,
            "edit": self.cmd_edit,
            "use": self.cmd_use,
            "attach": self.cmd_attach,
            "structured": self.cmd_structured,
            "bigprompt": self.cmd_bigprompt,
            "prompts": self.cmd_prompts,
            "voice": self.cmd_voice,
            "read": self.cmd_read,
        }

    @property
    def controller(self):
        return self.runtime.controller

    def list_commands(self) -> list[str]:
        return sorted(self._handlers.keys())

    def has_command(self, name: str) -> bool:
        return name in self._handlers

    async def handle(self, name: str, args: str) -> bool:
        handler = self._handlers.get(name)
        if not handler:
            return True
        return await handler(args)

    def set_draft(self, text: str) -> None:
        if self.repl is not None:
            self.repl.draft = text
        print(f"📝 Draft (press Enter to send):\n{text}")

    # ------------------------------------------------------------------
    # Lookups

    def resolve_message(self, ref: str) -> Message | None:
        """Find a message by its 1-based position in /messages or an id prefix."""
        messages = self.controller.messages
        ref = ref.strip()
        if ref.isdigit() and 1 <= int(ref) <= len(messages):
            return messages[int(ref) - 1]
        matches = [m for m in messages if m.id.startswith(ref)]
        return matches[0] if len(matches) == 1 else None

    def resolve_session(self, ref: str) -> Session | None:
        sessions = list(self.runtime.archive.list())
        ref = ref.strip()
        if ref.isdigit() and 1 <= int(ref) <= len(sessions):
            return sessions[int(ref) - 1]
        matches = [s for s in sessions if s.id.startswith(ref)]
        return matches[0] if len(matches) == 1 else None

    def _last_message(self) -> Message | None:
        messages = self.controller.messages
        return messages[-1] if messages else None

    # ------------------------------------------------------------------
    # Commands

    async def cmd_quit(self, args: str) -> bool:
        print("👋 Goodbye!")
        return False

    async def cmd_help(self, args: str) -> bool:
        aliases: dict[str, list[str]] = {}
        for alias, target in ALIASES.items():
            aliases.setdefault(target, []).append(f"/{alias}")

        print("\nCommands:")
        for name in self.list_commands():
            extra = "  (" + ", ".join(aliases[name]) + ")" if name in aliases else ""
            print(f"  /{name}{extra}")
        print("\nAnything else is sent to the assistant; start with // to send a literal /.")
        print("Messages are referenced by their number in /messages, sessions by")
        print("their number in /history.")
        print()
        return True

    async def cmd_messages(self, args: str) -> bool:
        for index, message in enumerate(self.controller.messages, start=1):
            print(format_message(message, index))
        return True

    async def cmd_new(self, args: str) -> bool:
        session_id = self.controller.start_new_conversation()
        if session_id:
            print(f"💾 Saved previous conversation as {session_id[:8]}")
        for message in self.controller.messages:
            print(format_message(message))
        return True

    async def cmd_clear(self, args: str) -> bool:
        return await self.cmd_new(args)

    async def cmd_history(self, args: str) -> bool:
        listing = self.runtime.archive.list()
        if not len(listing):
            print("No previous chats. Start a new conversation!")
            return True
        print("Chat history:")
        active = self.controller.active_session_id
        for index, session in enumerate(listing, start=1):
            marker = "*" if session.id == active else " "
            print(f" {marker}[{index}] {session.id[:8]}  {session.created_at}  {session.title}")
        return True

    async def cmd_load(self, args: str) -> bool:
        if not args:
            print("Usage: /load <number|id>")
            return True
        session = self.resolve_session(args)
        if session is None or not self.controller.load_conversation(session.id):
            print(f"❌ Session {args} not found")
            return True
        await self.cmd_messages("")
        return True

    async def cmd_delete(self, args: str) -> bool:
        if not args:
            print("Usage: /delete <number|id>")
            return True
        session = self.resolve_session(args)
        if session is None:
            print(f"❌ Session {args} not found")
            return True
        self.controller.delete_session(session.id)
        print(f"🗑️  Deleted {session.title}")
        return True

    async def cmd_clear_history(self, args: str) -> bool:
        self.controller.clear_history()
        print("✅ Cleared all saved conversations")
        return True

    async def cmd_retry(self, args: str) -> bool:
        message = self.resolve_message(args) if args else self._last_message()
        if message is None:
            print(f"❌ Message {args} not found")
            return True
        result = await self.controller.retry(message.id)
        if result is None and not self.controller.pending:
            print("Nothing to retry")
        return True

    async def cmd_edit(self, args: str) -> bool:
        parts = args.split(maxsplit=1)
        if len(parts) < 2:
            print("Usage: /edit <number|id> <new text>")
            return True
        message = self.resolve_message(parts[0])
        if message is None:
            print(f"❌ Message {parts[0]} not found")
            return True
        try:
            await self.controller.edit(message.id, parts[1])
        except MessageLogError as e:
            print(f"❌ {e}")
        return True

    async def cmd_use(self, args: str) -> bool:
        message = self.resolve_message(args) if args else None
        if message is None:
            print("Usage: /use <number|id>")
            return True
        try:
            self.set_draft(self.controller.reuse(message.id))
        except MessageLogError as e:
            print(f"❌ {e}")
        return True

    async def cmd_attach(self, args: str) -> bool:
        if not args:
            print("Usage: /attach <filepath>")
            return True
        path = Path(args).expanduser()
        try:
            content = path.read_bytes()
        except OSError as e:
            print(f"❌ Cannot read {args}: {e}")
            return True
        await self.controller.attach_file(path.name, content, mimetypes.guess_type(path.name)[0])
        return True

    async def cmd_structured(self, args: str) -> bool:
        text = args or (self.repl.draft if self.repl is not None else "")
        if not text.strip():
            print("Usage: /structured <text>")
            return True
        if self.repl is not None:
            self.repl.draft = ""
        await self.controller.send_structured(text)
        return True

    async def cmd_bigprompt(self, args: str) -> bool:
        self.set_draft(BIG_PROMPT_TEMPLATE)
        return True

    async def cmd_prompts(self, args: str) -> bool:
        if args.strip().isdigit():
            index = int(args)
            if 1 <= index <= len(QUICK_PROMPTS):
                self.set_draft(QUICK_PROMPTS[index - 1])
                return True
        print("Quick prompts (/prompts <number> to use one):")
        for index, prompt in enumerate(QUICK_PROMPTS, start=1):
            print(f"  [{index}] {prompt}")
        return True

    async def cmd_voice(self, args: str) -> bool:
        print("🎤 Listening...")
        transcript = await self.controller.transcribe()
        if transcript:
            self.set_draft(transcript)
        else:
            print("❌ No speech recognised")
        return True

    async def cmd_read(self, args: str) -> bool:
        message = self.resolve_message(args) if args else self._last_message()
        if message is None:
            print(f"❌ Message {args} not found")
            return True
        if not self.controller.read_aloud(message.id):
            print("Text-to-speech is not supported.")
        return True
