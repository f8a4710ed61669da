"""
Display and rendering helpers for the Bastion console.

Handles theming, prompts and transcript line styling. Shared by the
line console and the tabbed TUI.
"""

from rich.console import Console
from rich.text import Text
from prompt_toolkit.styles import Style as PTStyle

from ..rules.permissions import prompt_symbol
from ..state.schema import User
from .session import LineType, TerminalLine

# Shared console instance
console = Console()

# -----------------------------------------------------------------------------
# Theme: violet glass over black
# -----------------------------------------------------------------------------

THEME = {
    "primary": "medium_purple",     # prompts, borders
    "command": "cyan",              # echoed commands
    "output": "pale_green3",        # command output
    "danger": "red1",               # errors
    "system": "plum2",              # banners, completions
    "dim": "dim",                   # background text
}

LINE_STYLES = {
    LineType.COMMAND: THEME["command"],
    LineType.OUTPUT: THEME["output"],
    LineType.ERROR: THEME["danger"],
    LineType.SYSTEM: THEME["system"],
}

# Prompt toolkit style to match theme
pt_style = PTStyle.from_dict({
    "prompt": "#af87ff bold",
    "completion-menu.completion": "bg:#2a1a40 #d0c0e0",
    "completion-menu.completion.current": "bg:#5f3f8f #ffffff bold",
    "scrollbar.background": "bg:#2a1a40",
    "scrollbar.button": "bg:#5f3f8f",
})


def prompt_text(user: User) -> str:
    """Prompt such as `[morgana@bastion]#`."""
    return f"[{user.username}@bastion]{prompt_symbol(user.access_level)}"


def render_line(line: TerminalLine, user: User) -> Text:
    """Style one transcript line; commands are echoed behind the prompt."""
    text = Text()
    if line.type == LineType.COMMAND:
        text.append(f"{prompt_text(user)} ", style=THEME["primary"])
    text.append(line.content, style=LINE_STYLES[line.type])
    return text


def print_lines(lines: list[TerminalLine], user: User) -> None:
    """Print transcript lines to the shared console."""
    for line in lines:
        console.print(render_line(line, user))
