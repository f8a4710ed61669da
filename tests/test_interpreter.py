"""
Tests for the command interpreter.

Covers dispatch order, permission gating, fault recovery, macros,
history and suggestions.
"""

import asyncio

import pytest

from bastion.interface import CommandCatalog, CommandInterpreter, CommandResult
from bastion.interface.interpreter import CLEAR_SEQUENCE, MAX_MACRO_DEPTH
from bastion.state import CommandHistory, MacroStore


class TestEmptyInput:

    @pytest.mark.parametrize("line", ["", "   ", "\t \n"])
    def test_blank_rejected_without_history(self, interpreter, run, line):
        result = run(interpreter.execute(line))

        assert result.success is False
        assert "VOID COMMAND" in result.error
        assert len(interpreter.history) == 0


class TestRegistryDispatch:

    def test_runs_matching_command(self, interpreter, spies, run):
        result = run(interpreter.execute("status"))

        assert result.success is True
        assert result.output == ["STATUS: ONLINE"]
        assert spies["status"].call_count == 1

    def test_passes_args_flags_and_user(self, interpreter, spies, executor, run):
        run(interpreter.execute("status a --detailed -v b"))

        args, flags, user = spies["status"].calls[0]
        assert args == ["a", "b"]
        assert flags == {"detailed": True, "v": True}
        assert user == executor

    def test_alias_resolves(self, interpreter, spies, run):
        run(interpreter.execute("me"))
        assert spies["whoami"].call_count == 1

    def test_access_denied_never_executes(self, make_interpreter, guest, spies, run):
        interpreter = make_interpreter(guest)
        result = run(interpreter.execute("shutdown.ossuary_spindle --force"))

        assert result.success is False
        assert "ACCESS DENIED" in result.error
        assert "ROOT" in result.error
        assert spies["shutdown"].call_count == 0

    def test_root_allowed(self, make_interpreter, root, spies, run):
        interpreter = make_interpreter(root)
        result = run(interpreter.execute("shutdown.ossuary_spindle"))

        assert result.success is True
        assert spies["shutdown"].call_count == 1

    def test_command_failure_passes_through(self, interpreter, run):
        result = run(interpreter.execute("fizzle"))

        assert result.success is False
        assert result.error == "RITUAL FAULT: fizzled"

    def test_exception_becomes_critical_fault(self, interpreter, run):
        result = run(interpreter.execute("boom"))

        assert result.success is False
        assert result.error == "CRITICAL FAULT: spindle jammed"

    def test_exception_without_message(self, macro_store, executor, run):
        catalog = CommandCatalog()

        @catalog.command("silent")
        async def cmd_silent(args, flags, user):
            raise RuntimeError()

        interpreter = CommandInterpreter(catalog.build(), executor, macros=macro_store)
        result = run(interpreter.execute("silent"))

        assert result.error == "CRITICAL FAULT: Unknown system anomaly"

    def test_sync_callbacks_accepted(self, macro_store, executor, run):
        catalog = CommandCatalog()
        catalog.command("plain")(lambda args, flags, user: CommandResult.ok("plain"))

        interpreter = CommandInterpreter(catalog.build(), executor, macros=macro_store)
        assert run(interpreter.execute("plain")).output == ["plain"]


class TestUnknownCommand:

    def test_suggests_visible_match(self, interpreter, run):
        result = run(interpreter.execute("stat"))

        assert result.success is False
        assert "Unknown invocation 'stat'" in result.error
        assert "Did you mean" in result.error
        assert "status" in result.error

    def test_no_suggestions_points_to_help(self, interpreter, run):
        result = run(interpreter.execute("xyzzy"))

        assert result.success is False
        assert "Type 'help'" in result.error

    def test_shows_at_most_three(self, interpreter, macro_store, run):
        for name in ["s1", "s2", "s3", "s4"]:
            macro_store.define(name, ["status"])

        result = run(interpreter.execute("s"))
        shown = result.error.split("Did you mean: ")[1].rstrip("?").split(", ")

        assert len(shown) == 3

    def test_case_sensitive(self, interpreter, spies, run):
        result = run(interpreter.execute("Status"))

        assert result.success is False
        assert "status" in result.error
        assert spies["status"].call_count == 0


class TestHistoryCommand:

    def test_records_failed_lookups(self, interpreter, run):
        run(interpreter.execute("nonsense"))
        assert interpreter.history.entries() == ["nonsense"]

    def test_records_trimmed_input(self, interpreter, run):
        run(interpreter.execute("  status  "))
        assert interpreter.history.entries() == ["status"]

    def test_lists_recent_with_positions(self, interpreter, run):
        run(interpreter.execute("status"))
        run(interpreter.execute("whoami"))
        result = run(interpreter.execute("history"))

        assert result.success is True
        assert result.output[1:] == ["   1  status", "   2  whoami", "   3  history"]

    def test_default_limit_ten(self, interpreter, run):
        for _ in range(15):
            run(interpreter.execute("status"))
        result = run(interpreter.execute("history"))

        assert len(result.output) == 1 + 10
        assert result.output[-1].strip().startswith("16")

    def test_limit_flag(self, interpreter, run):
        for _ in range(5):
            run(interpreter.execute("status"))
        result = run(interpreter.execute("history --limit=2"))

        assert len(result.output) == 1 + 2

    def test_bad_limit(self, interpreter, run):
        result = run(interpreter.execute("history --limit=many"))

        assert result.success is False
        assert "--limit" in result.error

    def test_ring_capacity(self, make_interpreter, executor, run):
        interpreter = make_interpreter(executor, history=CommandHistory(100))
        for i in range(105):
            run(interpreter.execute(f"echo {i}"))

        entries = interpreter.history.entries()
        assert len(entries) == 100
        assert entries[0] == "echo 5"


class TestClearAndMacrosListing:

    def test_clear_returns_control_sequence(self, interpreter, run):
        result = run(interpreter.execute("clear"))

        assert result.success is True
        assert result.output == [CLEAR_SEQUENCE]

    def test_macros_empty_state(self, interpreter, run):
        result = run(interpreter.execute("macros"))

        assert result.success is True
        assert "No macros" in result.output[0]
        assert "define.macro" in result.output[1]

    def test_macros_lists_bodies(self, interpreter, macro_store, run):
        macro_store.define("greet", ["whoami", "status"])
        result = run(interpreter.execute("macros"))

        assert "macro.greet (2 commands)" in result.output
        assert "    whoami ; status" in result.output


class TestMacroDefinition:

    def test_define(self, interpreter, macro_store, run):
        result = run(interpreter.execute("define.macro greet whoami status"))

        assert result.success is True
        assert "greet" in result.output[0]
        assert "Commands (2)" in result.output[1]
        assert result.output[2] == "Invoke with: macro.greet"
        assert macro_store.get("greet") == ["whoami", "status"]

    @pytest.mark.parametrize("line", ["define.macro", "define.macro greet"])
    def test_usage_error(self, interpreter, macro_store, run, line):
        result = run(interpreter.execute(line))

        assert result.success is False
        assert "Usage" in result.error
        assert len(macro_store) == 0

    def test_flags_become_separate_steps(self, interpreter, macro_store, run):
        run(interpreter.execute("define.macro deep status --detailed"))
        assert macro_store.get("deep") == ["status", "--detailed"]

    def test_redefine_replaces(self, interpreter, macro_store, run):
        run(interpreter.execute("define.macro greet whoami status"))
        run(interpreter.execute("define.macro greet scan.temporal_echoes"))

        assert macro_store.get("greet") == ["scan.temporal_echoes"]

    def test_storage_failure_reported(self, registry, executor, run):
        from bastion.state import MemoryKeyValueStore

        class ReadOnlyStore(MemoryKeyValueStore):
            def set(self, key, value):
                raise OSError("read-only")

        interpreter = CommandInterpreter(registry, executor, macros=MacroStore(ReadOnlyStore()))
        result = run(interpreter.execute("define.macro greet whoami"))

        assert result.success is False
        assert "STORAGE FAULT" in result.error
        assert interpreter.macros.get("greet") == ["whoami"]


class TestMacroExecution:

    def test_runs_steps_in_order(self, interpreter, spies, run):
        run(interpreter.execute("define.macro greet whoami status"))
        result = run(interpreter.execute("macro.greet"))

        assert result.success is True
        assert spies["whoami"].call_count == 1
        assert spies["status"].call_count == 1
        body = result.output
        assert body.index("[1/2] ✓ whoami") < body.index("[2/2] ✓ status")
        assert "    USER: test" in body
        assert "    STATUS: ONLINE" in body
        assert body[-1] == "MACRO COMPLETE: 2/2 succeeded"

    def test_clear_step_has_no_control_sequence(self, interpreter, spies, run):
        """A clear step is reported but does not leak the escape sequence."""
        run(interpreter.execute("define.macro tidy clear status"))
        result = run(interpreter.execute("macro.tidy"))

        assert result.success is True
        assert result.output != [CLEAR_SEQUENCE]
        assert "[1/2] ✓ clear" in result.output
        assert not any(CLEAR_SEQUENCE in line for line in result.output)
        assert spies["status"].call_count == 1

    def test_failure_does_not_abort(self, interpreter, spies, run):
        run(interpreter.execute("define.macro greet fizzle status"))
        result = run(interpreter.execute("macro.greet"))

        assert result.success is True
        assert "[1/2] ✗ fizzle" in result.output
        assert "    RITUAL FAULT: fizzled" in result.output
        assert "    STATUS: ONLINE" in result.output
        assert spies["status"].call_count == 1
        assert result.output[-1] == "MACRO COMPLETE: 1/2 succeeded"

    def test_permissions_apply_to_steps(self, make_interpreter, guest, spies, run):
        interpreter = make_interpreter(guest)
        run(interpreter.execute("define.macro purge shutdown.ossuary_spindle status"))
        result = run(interpreter.execute("macro.purge"))

        assert result.success is True
        assert spies["shutdown"].call_count == 0
        assert any("ACCESS DENIED" in line for line in result.output)

    def test_unknown_macro(self, interpreter, run):
        result = run(interpreter.execute("macro.nothing"))

        assert result.success is False
        assert "not found" in result.error
        assert "macros" in result.error

    def test_nested_macros(self, interpreter, spies, run):
        run(interpreter.execute("define.macro inner status"))
        run(interpreter.execute("define.macro outer macro.inner whoami"))
        result = run(interpreter.execute("macro.outer"))

        assert result.success is True
        assert spies["status"].call_count == 1
        assert spies["whoami"].call_count == 1
        assert "    ⚡ MACRO inner: executing 1 commands" in result.output

    def test_self_recursion_is_bounded(self, interpreter, spies, run):
        run(interpreter.execute("define.macro loop status macro.loop"))
        result = run(interpreter.execute("macro.loop"))

        assert result.success is True
        assert spies["status"].call_count == MAX_MACRO_DEPTH
        assert any("RECURSION FAULT" in line for line in result.output)

    def test_steps_recorded_in_history(self, interpreter, run):
        run(interpreter.execute("define.macro greet whoami status"))
        run(interpreter.execute("macro.greet"))

        assert interpreter.history.entries()[-3:] == ["macro.greet", "whoami", "status"]

    def test_survives_reload(self, registry, memory_store, executor, spies, run):
        first = CommandInterpreter(registry, executor, macros=MacroStore(memory_store))
        run(first.execute("define.macro greet whoami status"))
        before = run(first.execute("macro.greet"))

        second = CommandInterpreter(registry, executor, macros=MacroStore(memory_store))
        after = run(second.execute("macro.greet"))

        assert after == before
        assert spies["whoami"].call_count == 2


class TestSuggestions:

    def test_substring_case_insensitive(self, interpreter):
        assert "status" in interpreter.get_suggestions("TAT")

    def test_hides_commands_above_level(self, make_interpreter, guest):
        interpreter = make_interpreter(guest)
        assert interpreter.get_suggestions("shutdown") == []

    def test_includes_meta_commands(self, interpreter):
        assert interpreter.get_suggestions("hist") == ["history"]
        assert "clear" in interpreter.get_suggestions("cle")

    def test_includes_macros(self, interpreter, macro_store):
        macro_store.define("greet", ["status"])
        assert interpreter.get_suggestions("gre") == ["macro.greet"]

    def test_at_most_five_in_order(self, interpreter, macro_store):
        for name in ["a", "b", "c"]:
            macro_store.define(name, ["status"])
        suggestions = interpreter.get_suggestions("")

        assert len(suggestions) == 5
        assert suggestions[0] == "status"

    def test_includes_aliases(self, interpreter):
        assert interpreter.get_suggestions("me") == ["me"]

    def test_deduplicated(self, interpreter, macro_store):
        macro_store.define("status", ["status"])
        suggestions = interpreter.get_suggestions("status")

        assert suggestions == ["status", "macro.status"]


class TestSerialization:

    def test_top_level_calls_do_not_interleave(self, macro_store, executor):
        order: list[str] = []
        catalog = CommandCatalog()

        @catalog.command("slow")
        async def cmd_slow(args, flags, user):
            order.append(f"start {args[0]}")
            await asyncio.sleep(0.01)
            order.append(f"end {args[0]}")
            return CommandResult.ok()

        interpreter = CommandInterpreter(catalog.build(), executor, macros=macro_store)

        async def scenario():
            await asyncio.gather(
                interpreter.execute("slow 1"),
                interpreter.execute("slow 2"),
            )

        asyncio.run(scenario())
        assert order == ["start 1", "end 1", "start 2", "end 2"]
