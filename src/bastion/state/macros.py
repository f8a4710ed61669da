"""
Macro storage for the Bastion interpreter.

A macro is a named, ordered list of raw command strings. Redefining a
name replaces its command list wholesale. The whole mapping is written
back to the key-value store after every definition.
"""

import json
import logging

from pydantic import ValidationError

from .schema import MacroBook
from .store import KeyValueStore, MemoryKeyValueStore

logger = logging.getLogger(__name__)

MACRO_STORE_KEY = "bastion_macros"


class MacroStore:
    """
    Persisted mapping of macro name -> command list.

    Corrupt or missing data loads as an empty store.
    """

    def __init__(
        self,
        backend: KeyValueStore | None = None,
        key: str = MACRO_STORE_KEY,
    ):
        self.backend = backend if backend is not None else MemoryKeyValueStore()
        self.key = key
        self._macros: dict[str, list[str]] = {}
        self.load()

    def load(self) -> None:
        """Replace in-memory macros with the persisted ones."""
        raw = self.backend.get(self.key)
        if raw is None:
            self._macros = {}
            return

        try:
            book = MacroBook.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable macro store '{self.key}': {e.error_count()} error(s)")
            self._macros = {}
            return

        self._macros = {name: list(commands) for name, commands in book.root.items()}
        logger.debug(f"Loaded {len(self._macros)} macro(s) from '{self.key}'")

    def save(self) -> bool:
        """Persist all macros. Returns True on success."""
        payload = json.dumps(self._macros, indent=2)
        try:
            self.backend.set(self.key, payload)
        except OSError as e:
            logger.error(f"Failed to save macro store '{self.key}': {e}")
            return False
        return True

    def define(self, name: str, commands: list[str]) -> bool:
        """
        Store a macro, replacing any previous definition, and persist.

        Args:
            name: Macro name
            commands: Ordered raw command strings (must not be empty)

        Returns:
            True if the store was persisted
        """
        if not commands:
            raise ValueError("a macro needs at least one command")
        self._macros[name] = list(commands)
        logger.info(f"Defined macro '{name}' ({len(commands)} commands)")
        return self.save()

    def get(self, name: str) -> list[str] | None:
        """Commands for a macro, or None if undefined."""
        commands = self._macros.get(name)
        return list(commands) if commands is not None else None

    def names(self) -> list[str]:
        """Macro names in definition order."""
        return list(self._macros)

    def items(self) -> list[tuple[str, list[str]]]:
        return [(name, list(commands)) for name, commands in self._macros.items()]

    def __contains__(self, name: str) -> bool:
        return name in self._macros

    def __len__(self) -> int:
        return len(self._macros)
