"""State management for the Bastion console."""

from .schema import AccessLevel, User, MacroBook
from .store import KeyValueStore, JsonKeyValueStore, MemoryKeyValueStore
from .macros import MacroStore, MACRO_STORE_KEY
from .history import CommandHistory, DEFAULT_HISTORY_LIMIT

__all__ = [
    # Schema
    "AccessLevel",
    "User",
    "MacroBook",
    # Store
    "KeyValueStore",
    "JsonKeyValueStore",
    "MemoryKeyValueStore",
    # Macros
    "MacroStore",
    "MACRO_STORE_KEY",
    # History
    "CommandHistory",
    "DEFAULT_HISTORY_LIMIT",
]
