"""
Key-value storage abstraction.

Separates persistence from domain logic for testability. The macro
store (and anything else that outlives a session) reads and writes
raw JSON text under a fixed key.
"""

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """
    Abstract storage interface for persisted console data.

    Implementations:
    - JsonKeyValueStore: File-based persistence (production)
    - MemoryKeyValueStore: In-memory storage (testing)
    """

    def get(self, key: str) -> str | None:
        """Return the stored text for key, or None if absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Persist text under key, replacing any previous value."""
        ...

    def delete(self, key: str) -> bool:
        """Remove key. Returns True if something was deleted."""
        ...


class JsonKeyValueStore:
    """
    File-based storage: one `<key>.json` file per key.

    Features:
    - Backup of the previous value on write
    - Missing or unreadable files read as absent
    """

    def __init__(self, data_dir: Path | str = "bastion_data"):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def get(self, key: str) -> str | None:
        """Read the file for key."""
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read {path}: {e}")
            return None

    def set(self, key: str, value: str) -> None:
        """Write value to the file for key, keeping a .bak of the old one."""
        path = self._path(key)

        if path.exists():
            backup = path.with_suffix(".json.bak")
            backup.write_bytes(path.read_bytes())

        path.write_text(value, encoding="utf-8")

    def delete(self, key: str) -> bool:
        """Delete the file for key."""
        path = self._path(key)
        if path.exists():
            path.unlink()
            return True
        return False


class MemoryKeyValueStore:
    """
    In-memory storage for testing.

    No file I/O - all data lives in memory.
    """

    def __init__(self):
        self.data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> bool:
        if key in self.data:
            del self.data[key]
            return True
        return False

    def clear(self) -> None:
        """Clear all keys (test utility)."""
        self.data.clear()
