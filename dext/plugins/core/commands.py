"""
Custom Commands Plugin - User-defined command aliases.

Reads command definitions from ~/.config/dext/commands.toml (or the
[plugins] commands_file setting) and offers the ones whose name or
description contains the typed phrase.

Example commands.toml:
    [commands.lock]
    description = "Lock screen"
    exec = "hyprlock"
    icon = "system-lock-screen"

    [commands.suspend]
    description = "Suspend system"
    exec = "systemctl suspend"
    icon = "system-suspend"
"""

import html
from pathlib import Path
from typing import Any, Dict, Optional

import toml
from loguru import logger

from dext import constants
from dext.plugins.base import Plugin
from dext.search.router import ResultItem


def load_commands(commands_path: Path) -> dict:
    """Load and validate commands; entries without 'exec' are skipped."""
    if not commands_path.exists():
        return {}

    try:
        data = toml.load(commands_path)
    except (toml.TomlDecodeError, OSError):
        logger.exception(f"Failed to load commands from {commands_path}")
        return {}

    commands = data.get("commands", {})
    for name, cmd in list(commands.items()):
        if not isinstance(cmd, dict) or "exec" not in cmd:
            logger.warning(f"Skipping malformed command '{name}': missing 'exec' field")
            del commands[name]
    return commands


class CommandsPlugin(Plugin):
    """Run user-defined shell commands by name."""

    name = "Commands"
    action = "exec"

    def __init__(self, commands: Optional[dict] = None):
        self.commands = commands or {}

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> "CommandsPlugin":
        path = settings.get("plugins", {}).get("commands_file") or constants.COMMANDS_PATH
        return cls(load_commands(Path(path)))

    def query(self, args: list[str]) -> list[ResultItem]:
        q = " ".join(args).strip().lower()

        if not q:
            return [
                self._command_to_result(name, cmd)
                for name, cmd in sorted(self.commands.items())
            ]

        return [
            self._command_to_result(name, cmd)
            for name, cmd in self.commands.items()
            if q in name.lower() or q in cmd.get("description", "").lower()
        ]

    def details(self, item: ResultItem) -> str:
        cmd = self.commands.get(item.extra.get("command"), {})
        exec_str = cmd.get("exec") or item.arg or ""
        return (
            f"<h2>{html.escape(item.title)}</h2>"
            f"<p>{html.escape(cmd.get('description', ''))}</p>"
            f"<pre>{html.escape(str(exec_str))}</pre>"
        )

    def _command_to_result(self, name: str, cmd: dict) -> ResultItem:
        """Convert a command definition to a ResultItem."""
        return ResultItem(
            title=name,
            subtitle=cmd.get("description", ""),
            arg=cmd["exec"],
            icon=cmd.get("icon", "utilities-terminal"),
            extra={"command": name},
        )


PLUGIN_CLASS = CommandsPlugin
