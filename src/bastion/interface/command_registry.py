"""
Command Registry for the Bastion console.

Provides a single, immutable source of truth for every command the
interpreter can dispatch. Both the line console and the tabbed TUI
consume the same registry through the interpreter.

Pattern: a catalog collects commands (decorator or direct), then
`build()` freezes them into a registry that is injected into the
interpreter. Nothing is registered globally.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, TYPE_CHECKING

from ..rules.permissions import check_permission
from ..state.schema import AccessLevel

if TYPE_CHECKING:
    from ..state.schema import User
    from .tokenizer import FlagValue


# -----------------------------------------------------------------------------
# Results
# -----------------------------------------------------------------------------

@dataclass
class CommandResult:
    """
    Uniform outcome of every command, meta-command and macro.

    Attributes:
        success: Whether the invocation succeeded
        output: Display lines (meaningful on success)
        error: Single display line (meaningful on failure)
    """
    success: bool
    output: list[str] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def ok(cls, *lines: str) -> "CommandResult":
        return cls(success=True, output=list(lines))

    @classmethod
    def fail(cls, error: str) -> "CommandResult":
        return cls(success=False, error=error)


# Type aliases
CommandHandler = Callable[
    [list[str], dict[str, "FlagValue"], "User"],
    Awaitable[CommandResult],
]


# -----------------------------------------------------------------------------
# Command Definition
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class CommandDescriptor:
    """
    A single command definition with all metadata.

    Attributes:
        name: The command name, matched case-sensitively (e.g., "status")
        execute: Async callback taking (args, flags, user)
        required_access: Lowest access level allowed to run it
        description: Short description for help and manual pages
        usage: Usage line for help and manual pages
        aliases: Alternative names for the command
    """
    name: str
    execute: CommandHandler
    required_access: AccessLevel = AccessLevel.GUEST
    description: str = ""
    usage: str = ""
    aliases: tuple[str, ...] = ()

    @property
    def identifiers(self) -> tuple[str, ...]:
        """Name followed by aliases."""
        return (self.name, *self.aliases)

    def matches(self, token: str) -> bool:
        return token == self.name or token in self.aliases

    def is_visible_to(self, level: AccessLevel) -> bool:
        return check_permission(level, self.required_access)


# -----------------------------------------------------------------------------
# Command Registry
# -----------------------------------------------------------------------------

class CommandRegistry:
    """
    Ordered, read-only collection of command descriptors.

    Construction rejects any name or alias that collides with another
    descriptor's name or aliases.
    """

    def __init__(self, commands: Iterable[CommandDescriptor] = ()):
        self._commands: tuple[CommandDescriptor, ...] = tuple(commands)
        self._index: dict[str, CommandDescriptor] = {}

        for cmd in self._commands:
            for key in cmd.identifiers:
                if key in self._index:
                    raise ValueError(
                        f"Command name collision: '{key}' is already registered "
                        f"to '{self._index[key].name}'"
                    )
                self._index[key] = cmd

    def __len__(self) -> int:
        return len(self._commands)

    def __iter__(self):
        return iter(self._commands)

    def __contains__(self, token: str) -> bool:
        return token in self._index

    def resolve(self, token: str) -> CommandDescriptor | None:
        """Exact, case-sensitive lookup by name or alias."""
        return self._index.get(token)

    def all_commands(self) -> list[CommandDescriptor]:
        """All descriptors in registry order."""
        return list(self._commands)

    def visible_commands(self, level: AccessLevel) -> list[CommandDescriptor]:
        """Descriptors the given access level may run, in registry order."""
        return [cmd for cmd in self._commands if cmd.is_visible_to(level)]

    def visible_identifiers(self, level: AccessLevel) -> list[str]:
        """Names and aliases the given access level may run, in registry order."""
        return [key for cmd in self.visible_commands(level) for key in cmd.identifiers]


class CommandCatalog:
    """
    Mutable builder for a CommandRegistry.

    Can be used as a decorator:
        catalog = CommandCatalog()

        @catalog.command("status", "Display system status", usage="status [--detailed]")
        async def cmd_status(args, flags, user):
            ...

    Or directly:
        catalog.add(CommandDescriptor(name="foo", execute=my_handler))

    Then freeze it:
        registry = catalog.build()
    """

    def __init__(self):
        self._commands: list[CommandDescriptor] = []

    def add(self, descriptor: CommandDescriptor) -> CommandDescriptor:
        self._commands.append(descriptor)
        return descriptor

    def command(
        self,
        name: str,
        description: str = "",
        usage: str = "",
        required_access: AccessLevel = AccessLevel.GUEST,
        aliases: Iterable[str] = (),
    ) -> Callable[[CommandHandler], CommandHandler]:
        """Register the decorated coroutine function as a command."""
        def decorator(fn: CommandHandler) -> CommandHandler:
            self.add(CommandDescriptor(
                name=name,
                execute=fn,
                required_access=required_access,
                description=description,
                usage=usage or name,
                aliases=tuple(aliases),
            ))
            return fn

        return decorator

    def build(self) -> CommandRegistry:
        return CommandRegistry(self._commands)


# -----------------------------------------------------------------------------
# Prompt-Toolkit Completer Integration
# -----------------------------------------------------------------------------

def create_completer(suggest: Callable[[str], list[str]]):
    """
    Create a prompt-toolkit Completer backed by interpreter suggestions.

    Args:
        suggest: Callable mapping a partial command to candidate identifiers,
                 usually CommandInterpreter.get_suggestions.
    """
    from prompt_toolkit.completion import Completer, Completion

    class RegistryCompleter(Completer):
        def get_completions(self, document, complete_event):
            text = document.text_before_cursor.lstrip()

            # Only the command token completes
            if not text or " " in text:
                return

            for candidate in suggest(text):
                yield Completion(
                    candidate,
                    start_position=-len(text),
                    display=candidate,
                )

    return RegistryCompleter()
