"""
Access rules as pure functions.

The hierarchy is fixed: guest < executor < root.
"""

from __future__ import annotations

from ..state.schema import AccessLevel

ACCESS_HIERARCHY: dict[AccessLevel, int] = {
    AccessLevel.GUEST: 1,
    AccessLevel.EXECUTOR: 2,
    AccessLevel.ROOT: 3,
}

ACCESS_DESCRIPTIONS: dict[AccessLevel, str] = {
    AccessLevel.ROOT: "Supreme Mystical Authority - Full bastion control",
    AccessLevel.EXECUTOR: "Advanced Practitioner - Ritual and chamber operations",
    AccessLevel.GUEST: "Initiate Observer - Basic system queries only",
}

PROMPT_SYMBOLS: dict[AccessLevel, str] = {
    AccessLevel.ROOT: "#",
    AccessLevel.EXECUTOR: "$",
    AccessLevel.GUEST: ">",
}


def access_rank(level: AccessLevel | str) -> int:
    """Numeric rank of an access level (guest=1, executor=2, root=3)."""
    return ACCESS_HIERARCHY[AccessLevel(level)]


def check_permission(user_level: AccessLevel | str, required_level: AccessLevel | str) -> bool:
    """
    Check whether a user level may run something gated at required_level.

    Args:
        user_level: The invoking user's level
        required_level: The level the command demands

    Returns:
        True if the user's rank is at least the required rank
    """
    return access_rank(user_level) >= access_rank(required_level)


def describe_access(level: AccessLevel | str) -> str:
    """Display description for an access level."""
    return ACCESS_DESCRIPTIONS.get(AccessLevel(level), "Unknown access level")


def prompt_symbol(level: AccessLevel | str) -> str:
    """Prompt suffix for an access level."""
    return PROMPT_SYMBOLS[AccessLevel(level)]
