"""
Line console for Bastion.

A single-tab prompt loop: prompt_toolkit reads input, the session
controller runs it, rich prints the transcript.
"""

from __future__ import annotations

from prompt_toolkit import PromptSession
from prompt_toolkit.application import run_in_terminal
from prompt_toolkit.document import Document
from prompt_toolkit.key_binding import KeyBindings

from .command_registry import create_completer
from .interpreter import CLEAR_SEQUENCE
from .renderer import THEME, console, print_lines, prompt_text, pt_style
from .session import SessionController, Tab

EXIT_WORDS = ("exit", "quit")


def _replace_text(buffer, text: str) -> None:
    buffer.document = Document(text, cursor_position=len(text))


def build_key_bindings(controller: SessionController, tab: Tab) -> KeyBindings:
    """Arrow keys recall this tab's commands; Tab completes through the controller."""
    bindings = KeyBindings()

    @bindings.add("up")
    def _history_back(event):
        tab.set_buffer(event.current_buffer.text)
        _replace_text(event.current_buffer, tab.recall_previous())

    @bindings.add("down")
    def _history_forward(event):
        tab.set_buffer(event.current_buffer.text)
        _replace_text(event.current_buffer, tab.recall_next())

    @bindings.add("tab")
    def _complete(event):
        tab.set_buffer(event.current_buffer.text)
        suggestions = controller.complete(tab)
        if len(suggestions) == 1:
            _replace_text(event.current_buffer, tab.buffer)
        elif suggestions:
            listing = tab.lines[-1]
            run_in_terminal(lambda: print_lines([listing], controller.interpreter.user))

    return bindings


class BastionCLI:
    """
    Prompt loop over one SessionController tab.

    Flow:
    1. Read a line (history recall and completion via key bindings)
    2. Submit it through the controller
    3. Print the new transcript lines
    4. Repeat until exit/quit or EOF
    """

    def __init__(self, controller: SessionController, show_banner: bool = True):
        self.controller = controller
        self.tab = controller.active
        self.show_banner = show_banner
        self.session = PromptSession(
            completer=create_completer(controller.interpreter.get_suggestions),
            key_bindings=build_key_bindings(controller, self.tab),
            style=pt_style,
        )

    @property
    def user(self):
        return self.controller.interpreter.user

    async def run(self) -> None:
        if self.show_banner:
            print_lines(self.tab.lines, self.user)

        while True:
            try:
                text = await self.session.prompt_async(
                    [("class:prompt", f"{prompt_text(self.user)} ")],
                )
            except KeyboardInterrupt:
                console.print(f"[{THEME['dim']}]Type exit or quit to leave[/{THEME['dim']}]")
                continue
            except EOFError:
                break

            if text.strip() in EXIT_WORDS:
                break

            self.tab.set_buffer(text)
            seen = len(self.tab.lines)
            result = await self.controller.submit(self.tab)
            if result is None:
                continue

            if result.success and result.output == [CLEAR_SEQUENCE]:
                console.clear()
                continue

            # The echoed command is already on screen from the prompt
            print_lines(self.tab.lines[seen + 1:], self.user)

        console.print(f"\n[{THEME['system']}]Dimensional link closed.[/{THEME['system']}]")
