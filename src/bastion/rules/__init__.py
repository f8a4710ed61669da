"""
Console rules as pure functions.

Separates logic from data models for easier testing.
"""

from .permissions import (
    access_rank,
    check_permission,
    describe_access,
    prompt_symbol,
)

__all__ = [
    "access_rank",
    "check_permission",
    "describe_access",
    "prompt_symbol",
]
