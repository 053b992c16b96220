from dataclasses import dataclass

COMMAND_PREFIX = "/"

ALIASES = {
    "q": "quit",
    "h": "help",
    "?": "help",
    "n": "new",
    "r": "retry",
    "e": "edit",
    "ls": "history",
}


@dataclass(frozen=True)
class RouteResult:
    kind: str
    name: str | None
    args: str


class InputRouter:
    """Splits a line into a prompt for the assistant or a slash command.

    A doubled prefix (``//etc/hosts``) sends the rest of the line literally.
    """

    def __init__(self, builtins, aliases: dict[str, str] | None = None):
        self.builtins = builtins
        self.aliases = ALIASES if aliases is None else aliases

    def route(self, user_input: str) -> RouteResult:
        if not user_input.startswith(COMMAND_PREFIX):
            return RouteResult(kind="prompt", name=None, args=user_input)
        if user_input.startswith(COMMAND_PREFIX * 2):
            return RouteResult(kind="prompt", name=None, args=user_input[1:])

        head, _, args = user_input[1:].partition(" ")
        name = self.aliases.get(head.lower(), head.lower())
        if self.builtins.has_command(name):
            return RouteResult(kind="builtin", name=name, args=args.strip())
        return RouteResult(kind="unknown", name=head, args=args.strip())
