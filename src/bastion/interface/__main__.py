"""
Run the Bastion console.

Usage:
    python -m bastion.interface
    python -m bastion.interface --user morgana --access root --tui
"""

import argparse
import asyncio
import logging
from pathlib import Path

from ..state import AccessLevel, CommandHistory, JsonKeyValueStore, MacroStore, User
from .commands import build_default_registry
from .config import get_config_path, load_config, save_config, session_settings
from .interpreter import CommandInterpreter
from .session import SessionController

logger = logging.getLogger(__name__)


def build_controller(config: dict, data_dir: Path) -> SessionController:
    """Wire registry, macro store, history and interpreter into a session."""
    settings = session_settings(config)
    user = User(username=settings.username, access_level=settings.access_level)
    interpreter = CommandInterpreter(
        registry=build_default_registry(),
        user=user,
        macros=MacroStore(JsonKeyValueStore(data_dir)),
        history=CommandHistory(settings.history_limit),
    )
    logger.info(f"Session opened for {user.username} ({user.access_level.value})")
    return SessionController(interpreter)


def main():
    """Entry point for the `bastion` console script."""
    parser = argparse.ArgumentParser(description="Eternum Bastion mystical console")
    parser.add_argument("--user", help="Username for this session")
    parser.add_argument(
        "--access",
        choices=[level.value for level in AccessLevel],
        help="Access level for this session",
    )
    parser.add_argument(
        "--data-dir",
        default="bastion_data",
        help="Directory for macros and settings (default: bastion_data)",
    )
    parser.add_argument("--tui", action="store_true", help="Use the tabbed TUI")
    parser.add_argument("--no-banner", "-q", action="store_true", help="Skip the welcome banner")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s [%(levelname)s] %(message)s',
    )

    data_dir = Path(args.data_dir)
    config = load_config(data_dir)
    if not get_config_path(data_dir).exists():
        # Leave an editable copy of the defaults on first run
        save_config(config, data_dir)

    # Command line overrides
    if args.user:
        config["username"] = args.user
    if args.access:
        config["access_level"] = args.access

    controller = build_controller(config, data_dir)

    if args.tui or config.get("interface") == "tui":
        from .tui import BastionTUI
        BastionTUI(controller).run()
    else:
        from .cli import BastionCLI
        cli = BastionCLI(controller, show_banner=config.get("animate_banner", True) and not args.no_banner)
        asyncio.run(cli.run())


if __name__ == "__main__":
    main()
