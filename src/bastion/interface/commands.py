"""
Default command catalog for the Bastion console.

These are the stock commands shipped with the console. Their bodies
are flavor: the interpreter only relies on the descriptor contract.
Hosts can build their own registry with CommandCatalog instead.
"""

from __future__ import annotations

from datetime import datetime

from ..rules.permissions import describe_access
from ..state.schema import AccessLevel, User
from .command_registry import CommandCatalog, CommandRegistry, CommandResult
from .tokenizer import FlagValue


def build_default_registry() -> CommandRegistry:
    """Create the stock registry (help, man, whoami, status, root operations)."""
    catalog = CommandCatalog()
    registry: CommandRegistry | None = None

    @catalog.command(
        "help",
        "Display available mystical commands",
        usage="help [command]",
        aliases=["?"],
    )
    async def cmd_help(args: list[str], flags: dict[str, FlagValue], user: User) -> CommandResult:
        if args:
            cmd = registry.resolve(args[0])
            if cmd is None:
                return CommandResult.fail(f"Command '{args[0]}' not found in mystical archives")
            return CommandResult.ok(
                f"┌─ {cmd.name.upper()} ─",
                f"│ Description: {cmd.description}",
                f"│ Usage: {cmd.usage}",
                f"│ Required Access: {cmd.required_access.value.upper()}",
                "└─────────────────────────────────────",
            )

        lines = ["═══ MYSTICAL COMMANDS ═══"]
        for cmd in registry.visible_commands(user.access_level):
            lines.append(f"  {cmd.name:<26} {cmd.description}")
        lines.extend([
            "",
            "  history [--limit=N]        Recent invocations",
            "  clear                      Clear the console",
            "  macros                     List inscribed macros",
            "  define.macro <name> <cmd>  Inscribe a macro",
            "  macro.<name>               Replay a macro",
            "",
            'Use "help <command>" or "man <command>" for details.',
        ])
        return CommandResult.ok(*lines)

    @catalog.command(
        "man",
        "Display detailed manual pages for commands",
        usage="man <command>",
    )
    async def cmd_man(args: list[str], flags: dict[str, FlagValue], user: User) -> CommandResult:
        if not args:
            return CommandResult.fail("MANUAL FAULT: Command name required. Usage: man <command>")

        cmd = registry.resolve(args[0])
        if cmd is None:
            return CommandResult.fail(f"Manual entry for '{args[0]}' not found in mystical archives")

        lines = [
            f"MYSTICAL MANUAL: {cmd.name.upper()}",
            "",
            "NAME",
            f"     {cmd.name} - {cmd.description}",
            "",
            "SYNOPSIS",
            f"     {cmd.usage}",
            "",
            "ACCESS LEVEL",
            f"     {cmd.required_access.value.upper()} or higher",
        ]
        if cmd.aliases:
            lines.extend(["", "ALIASES", f"     {', '.join(cmd.aliases)}"])
        lines.extend(["", "SEE ALSO", "     help(1), status(1)"])
        return CommandResult.ok(*lines)

    @catalog.command("whoami", "Display current user information")
    async def cmd_whoami(args: list[str], flags: dict[str, FlagValue], user: User) -> CommandResult:
        return CommandResult.ok(
            "═══ DIMENSIONAL IDENTITY ═══",
            f"👤 User: {user.username}",
            f"🔑 Access Level: {user.access_level.value.upper()}",
            f"🌟 Authentication: {'VERIFIED' if user.authenticated else 'UNVERIFIED'}",
            f"⏰ Session Active: {datetime.now():%Y-%m-%d %H:%M:%S}",
            "",
            f"🎭 {describe_access(user.access_level)}",
        )

    @catalog.command(
        "status",
        "Display current system status",
        usage="status [--detailed]",
    )
    async def cmd_status(args: list[str], flags: dict[str, FlagValue], user: User) -> CommandResult:
        lines = [
            "═══ SYSTEM STATUS ═══",
            "🔮 Bastion Core: ONLINE",
            "⚡ Aether Flow: 87% (Optimal)",
            "🛡️  Ward Integrity: 76% (Warning)",
            "🌀 Void Containment: 42% (Critical)",
        ]
        if flags.get("detailed") or flags.get("d"):
            lines.extend([
                "",
                "═══ DETAILED ANALYSIS ═══",
                "   • Prism Atrium: 12 active transformations",
                "   • Ember Ring: Synchronization in progress",
                "   • Void Nexus: Containment breach detected",
            ])
        return CommandResult.ok(*lines)

    @catalog.command(
        "lockdown.bastion_wide",
        "Initiate emergency bastion-wide security lockdown",
        usage="lockdown.bastion_wide [--except=<areas>]",
        required_access=AccessLevel.ROOT,
    )
    async def cmd_lockdown(args: list[str], flags: dict[str, FlagValue], user: User) -> CommandResult:
        exceptions = flags.get("except")
        areas = exceptions.split(",") if isinstance(exceptions, str) else []

        lines = [
            "🚨 EMERGENCY LOCKDOWN INITIATED",
            "🔒 Sealing all dimensional gateways...",
        ]
        if areas:
            lines.append("🔓 EXCEPTIONS MAINTAINED:")
            lines.extend(f"   • {area}: ACCESSIBLE" for area in areas)
        else:
            lines.append("🔒 NO EXCEPTIONS - TOTAL LOCKDOWN")
        lines.append("🚨 LOCKDOWN COMPLETE")
        return CommandResult.ok(*lines)

    @catalog.command(
        "shutdown.ossuary_spindle",
        "Shutdown the mystical ossuary spindle system",
        usage="shutdown.ossuary_spindle --force",
        required_access=AccessLevel.ROOT,
    )
    async def cmd_shutdown(args: list[str], flags: dict[str, FlagValue], user: User) -> CommandResult:
        if not flags.get("force"):
            return CommandResult.fail(
                "SAFETY FAULT: Ossuary spindle shutdown requires --force flag. "
                "This action cannot be undone."
            )
        return CommandResult.ok(
            "💀 OSSUARY SPINDLE SHUTDOWN",
            "   • Spindle RPM: 10,000... 5,000... 1,000... 0",
            "💀 OSSUARY SPINDLE: OFFLINE",
        )

    registry = catalog.build()
    return registry
