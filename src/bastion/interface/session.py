"""
Session and tab control for the Bastion console.

Each tab owns a transcript of rendered lines, an input buffer and a
recall cursor over the commands submitted in that tab. All tabs share
one interpreter, so the `history` ring and the macro store are common
to the whole session.

Tab lifecycle per submission: idle -> executing -> idle. A tab that
is executing ignores further submissions until its call resolves.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from ..state.schema import User
from .command_registry import CommandResult
from .interpreter import CLEAR_SEQUENCE, CommandInterpreter

NOT_BROWSING = -1


class LineType(Enum):
    """Kinds of transcript line, for styling."""
    COMMAND = "command"
    OUTPUT = "output"
    ERROR = "error"
    SYSTEM = "system"


@dataclass
class TerminalLine:
    type: LineType
    content: str
    timestamp: datetime = field(default_factory=datetime.now)


def welcome_lines(user: User) -> list[str]:
    """Banner shown at the top of every new tab."""
    return [
        "╔══════════════════════════════════════════════════════════════╗",
        "║              ETERNUM BASTION MYSTICAL INTERFACE              ║",
        "╚══════════════════════════════════════════════════════════════╝",
        "",
        f"🔮 Welcome, {user.username}",
        f"⚡ Access Level: {user.access_level.value.upper()}",
        "🌟 Dimensional Link: ESTABLISHED",
        "",
        'Type "help" for available commands or "man <command>" for detailed documentation.',
        "",
    ]


@dataclass
class Tab:
    """
    One console tab.

    Attributes:
        id: Stable identifier within the session
        title: Display title
        lines: Rendered transcript
        buffer: In-progress input
        submitted: Commands submitted in this tab, oldest first
        history_index: Recall cursor into submitted (-1 when not browsing)
        executing: True while a submission is in flight
    """
    id: int
    title: str
    lines: list[TerminalLine] = field(default_factory=list)
    buffer: str = ""
    submitted: list[str] = field(default_factory=list)
    history_index: int = NOT_BROWSING
    executing: bool = False

    def add_line(self, line_type: LineType, content: str) -> None:
        self.lines.append(TerminalLine(line_type, content))

    def set_buffer(self, text: str) -> None:
        """Replace the input buffer (keystrokes, paste)."""
        if not self.executing:
            self.buffer = text

    def recall_previous(self) -> str:
        """Arrow-up: step back through this tab's submitted commands."""
        if self.submitted:
            if self.history_index == NOT_BROWSING:
                self.history_index = len(self.submitted) - 1
            else:
                self.history_index = max(0, self.history_index - 1)
            self.buffer = self.submitted[self.history_index]
        return self.buffer

    def recall_next(self) -> str:
        """Arrow-down: step forward, clearing the buffer past the newest entry."""
        if self.history_index != NOT_BROWSING:
            if self.history_index == len(self.submitted) - 1:
                self.history_index = NOT_BROWSING
                self.buffer = ""
            else:
                self.history_index += 1
                self.buffer = self.submitted[self.history_index]
        return self.buffer


class SessionController:
    """
    Owns the tabs of one console session and drives the interpreter.

    Usage:
        controller = SessionController(interpreter)
        tab = controller.active
        tab.set_buffer("status --detailed")
        await controller.submit()
    """

    def __init__(self, interpreter: CommandInterpreter):
        self.interpreter = interpreter
        self.tabs: list[Tab] = []
        self._active = 0
        self._ids = itertools.count(1)
        self.open_tab()

    @property
    def active(self) -> Tab:
        return self.tabs[self._active]

    def get_tab(self, tab_id: int) -> Tab | None:
        for tab in self.tabs:
            if tab.id == tab_id:
                return tab
        return None

    # -------------------------------------------------------------------------
    # Tab management
    # -------------------------------------------------------------------------

    def open_tab(self, title: str | None = None) -> Tab:
        """Open a new tab and make it active."""
        tab_id = next(self._ids)
        tab = Tab(id=tab_id, title=title or f"Terminal {tab_id}")
        for content in welcome_lines(self.interpreter.user):
            tab.add_line(LineType.SYSTEM, content)
        self.tabs.append(tab)
        self._active = len(self.tabs) - 1
        return tab

    def close_tab(self, tab_id: int) -> bool:
        """Close a tab. The last remaining tab cannot be closed."""
        if len(self.tabs) <= 1:
            return False
        tab = self.get_tab(tab_id)
        if tab is None:
            return False

        active = self.active
        self.tabs.remove(tab)
        if active is tab:
            self._active = min(self._active, len(self.tabs) - 1)
        else:
            self._active = self.tabs.index(active)
        return True

    def switch_tab(self, tab_id: int) -> Tab | None:
        tab = self.get_tab(tab_id)
        if tab is not None:
            self._active = self.tabs.index(tab)
        return tab

    # -------------------------------------------------------------------------
    # Input handling
    # -------------------------------------------------------------------------

    async def submit(self, tab: Tab | None = None) -> CommandResult | None:
        """
        Execute the tab's buffer and append the outcome to its transcript.

        Returns:
            The CommandResult, or None if the buffer was blank or the tab
            was already executing
        """
        tab = tab or self.active
        if tab.executing:
            return None

        command = tab.buffer.strip()
        if not command:
            return None

        tab.executing = True
        tab.add_line(LineType.COMMAND, command)
        tab.submitted.append(command)
        tab.history_index = NOT_BROWSING

        try:
            result = await self.interpreter.execute(command)
            self._render(tab, result)
        finally:
            tab.buffer = ""
            tab.executing = False

        return result

    def _render(self, tab: Tab, result: CommandResult) -> None:
        if not result.success:
            tab.add_line(LineType.ERROR, result.error or "Unknown mystical disturbance")
            return

        if result.output == [CLEAR_SEQUENCE]:
            tab.lines.clear()
            return

        for content in result.output:
            tab.add_line(LineType.OUTPUT, content)

    def complete(self, tab: Tab | None = None) -> list[str]:
        """
        Tab-complete the buffer.

        One match replaces the buffer; several are listed in the
        transcript; none does nothing.
        """
        tab = tab or self.active
        if tab.executing:
            return []

        suggestions = self.interpreter.get_suggestions(tab.buffer)
        if len(suggestions) == 1:
            tab.buffer = suggestions[0]
        elif len(suggestions) > 1:
            tab.add_line(LineType.SYSTEM, f"Possible completions: {', '.join(suggestions)}")
        return suggestions
