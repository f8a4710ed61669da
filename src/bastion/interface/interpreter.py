"""
Command interpreter for the Bastion console.

Takes one raw input line and returns a CommandResult. Dispatch order:

    macro.<name>                 -> replay a stored macro
    define.macro <name> <cmd..>  -> store a macro
    history [--limit=N]          -> recent submitted lines
    clear                        -> terminal clear sequence
    macros                       -> list stored macros
    anything else                -> command registry (permission gated)

Every non-blank line is recorded in the shared history ring before
dispatch, including lines that fail to resolve. Macro steps go back
through the same path, so nested macros, meta-commands and permission
checks behave exactly as they do at the prompt.

No error escapes execute(): unknown commands, denied access and
faults raised by command callbacks all come back as failed results.
"""

from __future__ import annotations

import asyncio
import inspect
import logging

from ..rules.permissions import check_permission
from ..state.history import CommandHistory, DEFAULT_HISTORY_LIMIT
from ..state.macros import MacroStore
from ..state.schema import User
from .command_registry import CommandRegistry, CommandResult
from .tokenizer import ParsedInput, tokenize

logger = logging.getLogger(__name__)

MACRO_PREFIX = "macro."
DEFINE_MACRO = "define.macro"
META_COMMANDS = ("history", "clear", "macros")
CLEAR_SEQUENCE = "\x1b[2J\x1b[H"

MAX_SUGGESTIONS = 5
SHOWN_SUGGESTIONS = 3
DEFAULT_HISTORY_VIEW = 10
MAX_MACRO_DEPTH = 8


class CommandInterpreter:
    """
    Orchestrates tokenizing, meta-commands, macros and registry dispatch.

    One interpreter may be shared by several console tabs: they share
    its history ring and macro store. Top-level invocations are
    serialized by a lock; macro steps run inside the invocation that
    started them.
    """

    def __init__(
        self,
        registry: CommandRegistry,
        user: User,
        macros: MacroStore | None = None,
        history: CommandHistory | None = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self.registry = registry
        self.user = user
        self.macros = macros if macros is not None else MacroStore()
        self.history = history if history is not None else CommandHistory(history_limit)
        self._lock = asyncio.Lock()

    async def execute(self, line: str) -> CommandResult:
        """Run one raw input line to completion."""
        async with self._lock:
            return await self._run(line, depth=0)

    async def _run(self, line: str, depth: int) -> CommandResult:
        trimmed = line.strip()
        if not trimmed:
            return CommandResult.fail("VOID COMMAND: No mystical invocation detected")

        self.history.append(trimmed)
        parsed = tokenize(trimmed)
        name = parsed.command

        if name.startswith(MACRO_PREFIX):
            return await self._invoke_macro(name[len(MACRO_PREFIX):], depth)
        if name == DEFINE_MACRO:
            return self._define_macro(trimmed)
        if name == "history":
            return self._show_history(parsed)
        if name == "clear":
            return CommandResult.ok(CLEAR_SEQUENCE)
        if name == "macros":
            return self._list_macros()

        return await self._dispatch(parsed)

    # -------------------------------------------------------------------------
    # Registry dispatch
    # -------------------------------------------------------------------------

    async def _dispatch(self, parsed: ParsedInput) -> CommandResult:
        command = self.registry.resolve(parsed.command)

        if command is None:
            suggestions = self.get_suggestions(parsed.command)
            if suggestions:
                shown = ", ".join(suggestions[:SHOWN_SUGGESTIONS])
                return CommandResult.fail(
                    f"RUNE FAULT: Unknown invocation '{parsed.command}'. Did you mean: {shown}?"
                )
            return CommandResult.fail(
                f"RUNE FAULT: Unknown invocation '{parsed.command}'. "
                "Type 'help' for available commands."
            )

        if not check_permission(self.user.access_level, command.required_access):
            logger.info(
                f"Denied '{command.name}' to {self.user.username} "
                f"({self.user.access_level.value} < {command.required_access.value})"
            )
            return CommandResult.fail(
                "ACCESS DENIED: Insufficient mystical authority. "
                f"Required: {command.required_access.value.upper()}"
            )

        try:
            result = command.execute(parsed.args, parsed.flags, self.user)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.warning(f"Command '{command.name}' raised: {e!r}")
            message = str(e) or "Unknown system anomaly"
            return CommandResult.fail(f"CRITICAL FAULT: {message}")

        if not isinstance(result, CommandResult):
            logger.warning(f"Command '{command.name}' returned {type(result).__name__}")
            return CommandResult.fail("CRITICAL FAULT: Unknown system anomaly")
        return result

    # -------------------------------------------------------------------------
    # Meta-commands
    # -------------------------------------------------------------------------

    def _show_history(self, parsed: ParsedInput) -> CommandResult:
        limit = DEFAULT_HISTORY_VIEW
        raw_limit = parsed.flags.get("limit")
        if isinstance(raw_limit, str):
            try:
                limit = int(raw_limit)
            except ValueError:
                limit = 0
            if limit < 1:
                return CommandResult.fail(
                    "HISTORY FAULT: --limit must be a positive integer"
                )

        lines = ["═══ INVOCATION HISTORY ═══"]
        for position, entry in self.history.recent(limit):
            lines.append(f"{position:>4}  {entry}")
        return CommandResult.ok(*lines)

    def _list_macros(self) -> CommandResult:
        if not len(self.macros):
            return CommandResult.ok(
                "No macros inscribed yet.",
                f"Create one with: {DEFINE_MACRO} <name> <cmd1> [cmd2...]",
            )

        lines = ["═══ INSCRIBED MACROS ═══"]
        for name, commands in self.macros.items():
            lines.append(f"{MACRO_PREFIX}{name} ({len(commands)} commands)")
            lines.append(f"    {' ; '.join(commands)}")
        return CommandResult.ok(*lines)

    # -------------------------------------------------------------------------
    # Macros
    # -------------------------------------------------------------------------

    def _define_macro(self, line: str) -> CommandResult:
        tokens = line.split()
        if len(tokens) <= 2:
            return CommandResult.fail(
                f"MACRO FAULT: Usage: {DEFINE_MACRO} <name> <cmd1> [cmd2...]"
            )

        name, commands = tokens[1], tokens[2:]
        saved = self.macros.define(name, commands)
        if not saved:
            return CommandResult.fail(
                f"STORAGE FAULT: Macro '{name}' is active for this session but could not be saved"
            )

        return CommandResult.ok(
            f"✨ MACRO '{name}' INSCRIBED",
            f"Commands ({len(commands)}): {', '.join(commands)}",
            f"Invoke with: {MACRO_PREFIX}{name}",
        )

    async def _invoke_macro(self, name: str, depth: int) -> CommandResult:
        commands = self.macros.get(name)
        if commands is None:
            return CommandResult.fail(
                f"MACRO FAULT: Macro '{name}' not found. Type 'macros' to list inscribed macros."
            )
        if depth >= MAX_MACRO_DEPTH:
            return CommandResult.fail(
                f"RECURSION FAULT: Macro nesting deeper than {MAX_MACRO_DEPTH} levels"
            )

        total = len(commands)
        lines = [f"⚡ MACRO {name}: executing {total} commands"]
        succeeded = 0

        for i, step in enumerate(commands, start=1):
            result = await self._run(step, depth + 1)
            if result.success:
                succeeded += 1
                lines.append(f"[{i}/{total}] ✓ {step}")
                lines.extend(f"    {out}" for out in result.output if out != CLEAR_SEQUENCE)
            else:
                lines.append(f"[{i}/{total}] ✗ {step}")
                lines.append(f"    {result.error}")

        lines.append(f"MACRO COMPLETE: {succeeded}/{total} succeeded")
        return CommandResult.ok(*lines)

    # -------------------------------------------------------------------------
    # Suggestions
    # -------------------------------------------------------------------------

    def candidates(self) -> list[str]:
        """Every identifier the current user could type, in display order."""
        names = self.registry.visible_identifiers(self.user.access_level)
        names.extend(META_COMMANDS)
        names.extend(f"{MACRO_PREFIX}{name}" for name in self.macros.names())
        return names

    def get_suggestions(self, partial: str) -> list[str]:
        """
        Identifiers containing partial, case-insensitively.

        Args:
            partial: Typed fragment

        Returns:
            Up to five distinct identifiers in registry/definition order
        """
        needle = partial.lower()
        seen: set[str] = set()
        matches: list[str] = []

        for name in self.candidates():
            if name in seen or needle not in name.lower():
                continue
            seen.add(name)
            matches.append(name)
            if len(matches) == MAX_SUGGESTIONS:
                break

        return matches
