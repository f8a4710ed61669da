"""
Pytest fixtures for Bastion tests.

Provides in-memory stores, users at each access level and a small
registry whose commands record how they were called.
"""

import asyncio

import pytest

from bastion.interface import (
    CommandCatalog,
    CommandInterpreter,
    CommandResult,
    SessionController,
)
from bastion.state import (
    AccessLevel,
    CommandHistory,
    MacroStore,
    MemoryKeyValueStore,
    User,
)


class CallSpy:
    """Async command callback that records its calls."""

    def __init__(self, *output: str):
        self.output = list(output) or ["ok"]
        self.calls: list[tuple[list[str], dict, User]] = []

    async def __call__(self, args, flags, user):
        self.calls.append((args, flags, user))
        return CommandResult.ok(*self.output)

    @property
    def call_count(self) -> int:
        return len(self.calls)


@pytest.fixture
def spies():
    """Named call spies backing the test registry."""
    return {
        "status": CallSpy("STATUS: ONLINE"),
        "whoami": CallSpy("USER: test"),
        "scan": CallSpy("SCAN COMPLETE"),
        "shutdown": CallSpy("SPINDLE OFFLINE"),
    }


@pytest.fixture
def registry(spies):
    """Registry with one command per access level plus failing commands."""
    catalog = CommandCatalog()
    catalog.command("status", "System status", usage="status [--detailed]")(spies["status"])
    catalog.command("whoami", "Current user", aliases=["me"])(spies["whoami"])
    catalog.command(
        "scan.temporal_echoes",
        "Scan time echoes",
        required_access=AccessLevel.EXECUTOR,
    )(spies["scan"])
    catalog.command(
        "shutdown.ossuary_spindle",
        "Shutdown the spindle",
        required_access=AccessLevel.ROOT,
    )(spies["shutdown"])

    @catalog.command("boom", "Always raises")
    async def cmd_boom(args, flags, user):
        raise RuntimeError("spindle jammed")

    @catalog.command("fizzle", "Always fails")
    async def cmd_fizzle(args, flags, user):
        return CommandResult.fail("RITUAL FAULT: fizzled")

    @catalog.command("echo", "Echo arguments and flags")
    async def cmd_echo(args, flags, user):
        return CommandResult.ok(" ".join(args), repr(sorted(flags.items())))

    return catalog.build()


@pytest.fixture
def memory_store():
    """In-memory key-value store for testing."""
    return MemoryKeyValueStore()


@pytest.fixture
def macro_store(memory_store):
    """Macro store over the in-memory backend."""
    return MacroStore(memory_store)


@pytest.fixture
def guest():
    return User(username="wanderer", access_level=AccessLevel.GUEST)


@pytest.fixture
def executor():
    return User(username="adept", access_level=AccessLevel.EXECUTOR)


@pytest.fixture
def root():
    return User(username="morgana", access_level=AccessLevel.ROOT)


@pytest.fixture
def make_interpreter(registry, macro_store):
    """Factory for interpreters sharing the test registry and macro store."""
    def factory(user, macros=None, history=None):
        return CommandInterpreter(
            registry=registry,
            user=user,
            macros=macros if macros is not None else macro_store,
            history=history if history is not None else CommandHistory(100),
        )
    return factory


@pytest.fixture
def interpreter(make_interpreter, executor):
    """Interpreter for an executor-level user."""
    return make_interpreter(executor)


@pytest.fixture
def controller(interpreter):
    """Session controller with one tab."""
    return SessionController(interpreter)


@pytest.fixture
def run():
    """Run a coroutine to completion."""
    return asyncio.run
