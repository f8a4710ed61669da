"""
Pydantic models for Bastion console state.

Users are handed to the interpreter by the (external) authentication
layer. Macros are persisted as a plain name -> command list mapping.
"""

from enum import Enum
from pydantic import BaseModel, Field, RootModel, field_validator


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class AccessLevel(str, Enum):
    GUEST = "guest"          # Initiate observer
    EXECUTOR = "executor"    # Ritual and chamber operations
    ROOT = "root"            # Full bastion control


# -----------------------------------------------------------------------------
# Identity
# -----------------------------------------------------------------------------

class User(BaseModel):
    """The invoking user. Authentication happens elsewhere."""
    username: str
    access_level: AccessLevel = AccessLevel.GUEST
    authenticated: bool = True


# -----------------------------------------------------------------------------
# Macros
# -----------------------------------------------------------------------------

class MacroBook(RootModel[dict[str, list[str]]]):
    """
    Serialized macro store.

    Stored as a JSON object of macro name -> ordered command strings.
    Every macro must carry at least one command.
    """
    root: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("root")
    @classmethod
    def _commands_not_empty(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        for name, commands in value.items():
            if not commands:
                raise ValueError(f"macro '{name}' has no commands")
        return value
