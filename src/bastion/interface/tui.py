"""
Bastion Textual TUI - tabbed console.

Every tab has its own transcript and input line; all tabs share one
interpreter. Ctrl+T opens a tab, Ctrl+W closes the active one (never
the last), Up/Down recall the tab's commands, Tab completes.
"""

from __future__ import annotations

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header, Input, RichLog, TabbedContent, TabPane

from .interpreter import CLEAR_SEQUENCE
from .renderer import render_line
from .session import SessionController, Tab, TerminalLine


def pane_id(tab: Tab) -> str:
    return f"tab-{tab.id}"


class CommandInput(Input):
    """Input line bound to one console tab."""

    BINDINGS = [
        Binding("tab", "complete", "Complete", show=False, priority=True),
        Binding("up", "history_back", "History Back", show=False, priority=True),
        Binding("down", "history_forward", "History Forward", show=False, priority=True),
    ]

    def __init__(self, tab: Tab, **kwargs):
        self.tab = tab
        super().__init__(**kwargs)

    def watch_value(self, value: str) -> None:
        self.tab.set_buffer(value)

    def _show(self, text: str) -> None:
        self.value = text
        self.cursor_position = len(text)

    def action_history_back(self) -> None:
        self._show(self.tab.recall_previous())

    def action_history_forward(self) -> None:
        self._show(self.tab.recall_next())

    def action_complete(self) -> None:
        suggestions = self.app.controller.complete(self.tab)
        if len(suggestions) == 1:
            self._show(self.tab.buffer)
        elif suggestions:
            self.app.view_for(self.tab).write_lines([self.tab.lines[-1]])


class TabView(Vertical):
    """Transcript and input for one tab."""

    def __init__(self, tab: Tab, **kwargs):
        super().__init__(**kwargs)
        self.tab = tab

    def compose(self) -> ComposeResult:
        yield RichLog(classes="transcript", wrap=True)
        yield CommandInput(self.tab, placeholder="Type a command...", classes="command-input")

    def on_mount(self) -> None:
        self.write_lines(self.tab.lines)

    def write_lines(self, lines: list[TerminalLine]) -> None:
        log = self.query_one(RichLog)
        user = self.app.controller.interpreter.user
        for line in lines:
            log.write(render_line(line, user))

    def clear(self) -> None:
        self.query_one(RichLog).clear()


class BastionTUI(App):
    """Tabbed Bastion console."""

    TITLE = "Eternum Bastion"

    CSS = """
    Screen {
        background: #0a0612;
    }
    .transcript {
        height: 1fr;
        border: round #5f3f8f;
        background: #0a0612;
    }
    .command-input {
        border: tall #5f3f8f;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", show=True),
        Binding("ctrl+t", "new_tab", "New Tab", show=True),
        Binding("ctrl+w", "close_tab", "Close Tab", show=True),
    ]

    def __init__(self, controller: SessionController, **kwargs):
        super().__init__(**kwargs)
        self.controller = controller

    def compose(self) -> ComposeResult:
        yield Header()
        with TabbedContent(id="tabs"):
            for tab in self.controller.tabs:
                with TabPane(tab.title, id=pane_id(tab)):
                    yield TabView(tab)
        yield Footer()

    def view_for(self, tab: Tab) -> TabView:
        return self.query_one(f"#{pane_id(tab)}").query_one(TabView)

    def on_tabbed_content_tab_activated(self, event: TabbedContent.TabActivated) -> None:
        tab_id = int(event.pane.id.removeprefix("tab-"))
        tab = self.controller.switch_tab(tab_id)
        if tab is not None:
            self.view_for(tab).query_one(CommandInput).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if isinstance(event.input, CommandInput):
            self.run_command(event.input)

    @work
    async def run_command(self, command_input: CommandInput) -> None:
        tab = command_input.tab
        seen = len(tab.lines)
        result = await self.controller.submit(tab)
        if result is None:
            return

        command_input.value = ""
        view = self.view_for(tab)
        if result.success and result.output == [CLEAR_SEQUENCE]:
            view.clear()
        else:
            view.write_lines(tab.lines[seen:])

    async def action_new_tab(self) -> None:
        tab = self.controller.open_tab()
        tabs = self.query_one("#tabs", TabbedContent)
        await tabs.add_pane(TabPane(tab.title, TabView(tab), id=pane_id(tab)))
        tabs.active = pane_id(tab)

    async def action_close_tab(self) -> None:
        tab = self.controller.active
        if not self.controller.close_tab(tab.id):
            self.notify("The last tab cannot be closed", severity="warning")
            return
        await self.query_one("#tabs", TabbedContent).remove_pane(pane_id(tab))
