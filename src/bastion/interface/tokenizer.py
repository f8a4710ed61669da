"""
Input tokenizer for the Bastion console.

Splits a raw line on whitespace into a command name, positional
arguments and flags. There is no quoting or escaping: a quoted
multi-word value is split like anything else.

    cast --power=9 -loud target1 target2
      command = "cast"
      args    = ["target1", "target2"]
      flags   = {"power": "9", "loud": True}
"""

from __future__ import annotations

from dataclasses import dataclass, field

FlagValue = str | bool


@dataclass
class ParsedInput:
    """One tokenized invocation."""
    command: str
    args: list[str] = field(default_factory=list)
    flags: dict[str, FlagValue] = field(default_factory=dict)


def tokenize(line: str) -> ParsedInput:
    """
    Tokenize a non-blank input line.

    Args:
        line: Raw input; callers reject blank lines first

    Returns:
        ParsedInput with the first token as the command

    Raises:
        ValueError: If the line has no tokens
    """
    parts = line.split()
    if not parts:
        raise ValueError("cannot tokenize a blank line")

    parsed = ParsedInput(command=parts[0])

    for part in parts[1:]:
        if part.startswith("--"):
            key, sep, value = part[2:].partition("=")
            # "--key=" carries no value and reads as a bare switch
            parsed.flags[key] = value if sep and value else True
        elif part.startswith("-"):
            parsed.flags[part[1:]] = True
        else:
            parsed.args.append(part)

    return parsed
