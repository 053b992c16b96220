from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime, timezone

from dotenv import load_dotenv

from smartbot.config import ChatConfig, ConfigError
from smartbot.runtime.display import EventPrinter, format_message
from smartbot.runtime.repl import ChatREPL
from smartbot.runtime.runtime import ChatRuntime, build_archive
from smartbot.sessions.archive import ArchiveUnavailable


def main() -> int:
    load_dotenv()
    return _main(sys.argv[1:])


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
NOISY_LOGGERS = ("httpx", "httpcore", "LiteLLM")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_format: str = "text",
    log_file: str | None = None,
    default_level: int = logging.INFO,
) -> None:
    """Configure root logging.

    The REPL passes ``default_level=WARNING`` so routine log lines do not
    interleave with the conversation; ``--log-file`` moves them off the
    terminal entirely.
    """
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = default_level

    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logging.basicConfig(level=level, handlers=[handler])

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("-q", "--quiet", action="store_true")
    parser.add_argument("--log-format", default="text", choices=["text", "json"])
    parser.add_argument("--log-file", default=None, help="Write logs to this file instead of stderr")
    parser.add_argument("--history-dir", default=None, help="Directory holding chat history")
    parser.add_argument(
        "--ephemeral",
        action="store_true",
        help="Keep chat history in memory only",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="smartbot", description="SmartBot - AI chat assistant")
    subparsers = parser.add_subparsers(dest="command", required=False)

    repl = subparsers.add_parser("repl", help="Start an interactive conversation")
    repl.add_argument(
        "--model",
        default=None,
        help="Model to use without a chat service (supports aliases: sonnet, opus, haiku, flash, deepseek)",
    )
    repl.add_argument("--api-url", default=None, help="Chat service base URL")
    repl.add_argument("--message", "-m", help="First message to send")
    _add_common_args(repl)

    sessions = subparsers.add_parser("sessions", help="Manage saved conversations")
    _add_common_args(sessions)
    sessions_sub = sessions.add_subparsers(dest="sessions_cmd", required=False)

    sessions_sub.add_parser("list", help="List saved conversations")

    sessions_show = sessions_sub.add_parser("show", help="Print a saved conversation")
    sessions_show.add_argument("session_id")

    sessions_delete = sessions_sub.add_parser("delete", help="Delete a saved conversation")
    sessions_delete.add_argument("session_id")

    sessions_sub.add_parser("clear", help="Delete all saved conversations")

    return parser


def _config_from_args(args) -> ChatConfig:
    config = ChatConfig.from_env(
        model=getattr(args, "model", None),
        api_url=getattr(args, "api_url", None),
        history_dir=args.history_dir,
    )
    config.ephemeral = bool(args.ephemeral)
    config.validate()
    return config


def _main(argv: list[str]) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv or ["repl"])

    cmd = args.command or "repl"
    setup_logging(
        args.verbose,
        args.quiet,
        args.log_format,
        log_file=args.log_file,
        default_level=logging.WARNING if cmd == "repl" else logging.INFO,
    )
    logger = logging.getLogger(__name__)

    try:
        config = _config_from_args(args)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    if cmd == "repl":
        return _cmd_repl(config, message=args.message)
    if cmd == "sessions":
        return _cmd_sessions(config, args)

    parser.print_help(sys.stderr)
    return 2


def _cmd_repl(config: ChatConfig, *, message: str | None) -> int:
    runtime = ChatRuntime(config, on_event=EventPrinter())
    repl = ChatREPL(runtime)
    try:
        asyncio.run(repl.run(initial_message=message))
    except KeyboardInterrupt:
        return 130
    return 0


def _cmd_sessions(config: ChatConfig, args) -> int:
    archive = build_archive(config)
    sub = args.sessions_cmd or "list"

    if sub == "list":
        listing = archive.list()
        if not len(listing):
            print("No saved conversations.")
            return 0
        print(f"{'ID':<10} {'Created':<20} {'Msgs':>4}  {'Title'}")
        for session in listing:
            print(f"{session.id[:10]:<10} {session.created_at:<20} {len(session.messages):>4}  {session.title}")
        return 0

    if sub == "show":
        session = _find_session(archive, args.session_id)
        if session is None:
            print(f"Error: Session {args.session_id} not found", file=sys.stderr)
            return 1
        print(f"# {session.title} ({session.created_at})")
        for index, message in enumerate(session.messages, start=1):
            print(format_message(message, index))
        return 0

    try:
        if sub == "delete":
            session = _find_session(archive, args.session_id)
            if session is None:
                print(f"Error: Session {args.session_id} not found", file=sys.stderr)
                return 1
            archive.delete(session.id)
            print(f"Deleted {session.id}")
            return 0

        if sub == "clear":
            archive.clear()
            print("Cleared all saved conversations.")
            return 0
    except ArchiveUnavailable as e:
        print(f"Error: chat history could not be saved: {e}", file=sys.stderr)
        return 1

    print(f"Unknown sessions command: {sub}", file=sys.stderr)
    return 2


def _find_session(archive, ref: str):
    matches = [s for s in archive.list() if s.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None


if __name__ == "__main__":
    raise SystemExit(main())
