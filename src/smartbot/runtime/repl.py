import asyncio
import logging
import threading

from smartbot.controller import ConversationBusy
from smartbot.message_log import MessageLogError
from smartbot.runtime.builtins import BuiltinCommands
from smartbot.runtime.display import format_message
from smartbot.runtime.router import InputRouter

logger = logging.getLogger(__name__)

PROMPT = "\n> "


class ChatREPL:
    def __init__(self, runtime):
        self.runtime = runtime
        self.builtins = BuiltinCommands(runtime, repl=self)
        self.router = InputRouter(self.builtins)
        self.draft = ""

    async def read_input(self) -> str:
        """Read one line without blocking the loop.

        The reader runs on a daemon thread so an interrupted prompt does not
        keep the process alive waiting for Enter.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[str] = loop.create_future()

        def deliver(setter, value) -> None:
            if not future.done():
                setter(value)

        def reader() -> None:
            try:
                line = input(PROMPT)
            except (EOFError, OSError) as e:
                outcome = (future.set_exception, e)
            else:
                outcome = (future.set_result, line)
            try:
                loop.call_soon_threadsafe(deliver, *outcome)
            except RuntimeError:
                logger.debug("Input arrived after the event loop closed")

        threading.Thread(target=reader, name="smartbot-input", daemon=True).start()
        return await future

    async def run(self, initial_message: str | None = None) -> None:
        print(f"🤖 SmartBot started ({self.runtime.gateway_label})")
        print("Commands: /help for all commands")
        print()
        for message in self.runtime.controller.messages:
            print(format_message(message))

        try:
            if initial_message:
                await self.runtime.controller.send(initial_message)

            while True:
                try:
                    user_input = (await self.read_input()).strip()
                    if not user_input:
                        if not self.draft:
                            continue
                        user_input, self.draft = self.draft, ""

                    if not await self.dispatch(user_input):
                        break

                except ConversationBusy as e:
                    print(f"⏳ {e}")
                except MessageLogError as e:
                    print(f"❌ {e}")
                except (KeyboardInterrupt, asyncio.CancelledError):
                    print("\n\n⚠️  Interrupted")
                    break
                except EOFError:
                    break
        finally:
            await self.runtime.aclose()

    async def dispatch(self, user_input: str) -> bool:
        route = self.router.route(user_input)
        if route.kind == "builtin":
            return await self.builtins.handle(route.name, route.args)
        if route.kind == "unknown":
            print(f"Unknown command: /{route.name}. Type /help for available commands.")
            return True
        await self.runtime.controller.send(route.args)
        return True
