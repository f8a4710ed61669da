"""Interpreter, command registry and front ends for the Bastion console."""

from .command_registry import (
    CommandCatalog,
    CommandDescriptor,
    CommandRegistry,
    CommandResult,
)
from .tokenizer import ParsedInput, tokenize
from .interpreter import CommandInterpreter
from .session import LineType, SessionController, Tab, TerminalLine
from .commands import build_default_registry

__all__ = [
    "CommandCatalog",
    "CommandDescriptor",
    "CommandRegistry",
    "CommandResult",
    "ParsedInput",
    "tokenize",
    "CommandInterpreter",
    "LineType",
    "SessionController",
    "Tab",
    "TerminalLine",
    "build_default_registry",
]
