"""
Actions - Side effects for executing and copying result items.

Named actions:
  open  -> open a URL or file with xdg-open
  exec  -> run a shell command
  copy  -> write text to the clipboard with wl-copy

The argument handed to an action depends on the held modifier:
super modifier -> item.mods["cmd"]["arg"], else alt modifier ->
item.mods["alt"]["arg"], else item.arg.
"""

import subprocess
from dataclasses import dataclass
from typing import Any, Callable, Optional

from loguru import logger

from dext.search.router import ResultItem
from dext.utils.helpers import get_own_prop


@dataclass
class ExecuteMessage:
    """Payload of an execute-item command."""
    item: ResultItem
    action: Optional[str] = None
    is_super_mod: bool = False
    is_alt_mod: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "ExecuteMessage":
        # Front ends send camelCase modifier flags
        item = data["item"]
        if isinstance(item, dict):
            item = ResultItem.from_dict(item)
        return cls(
            item=item,
            action=data.get("action"),
            is_super_mod=bool(data.get("is_super_mod", data.get("isSuperMod"))),
            is_alt_mod=bool(data.get("is_alt_mod", data.get("isAltMod"))),
        )


def resolve_arg(message: ExecuteMessage) -> Any:
    """Pick the argument by modifier priority: super, alt, none."""
    return (
        (message.is_super_mod and get_own_prop(message, "item.mods.cmd.arg"))
        or (message.is_alt_mod and get_own_prop(message, "item.mods.alt.arg"))
        or message.item.arg
    )


def open_target(message: ExecuteMessage, arg: Any) -> None:
    """Open URL or path in the default handler via xdg-open."""
    try:
        subprocess.Popen(
            ["xdg-open", str(arg)],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except FileNotFoundError:
        logger.warning("xdg-open not found, cannot open target")


def exec_command(message: ExecuteMessage, arg: Any) -> None:
    """Run a shell command detached from the engine."""
    try:
        subprocess.Popen(
            str(arg),
            shell=True,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError:
        logger.exception(f"Failed to execute command: {arg}")


def copy_text(message: ExecuteMessage, arg: Any) -> None:
    write_clipboard(str(arg))


ACTIONS: dict[str, Callable[[ExecuteMessage, Any], None]] = {
    "open": open_target,
    "exec": exec_command,
    "copy": copy_text,
}


def execute(message: ExecuteMessage, actions: Optional[dict] = None) -> None:
    """
    Run the named action with the modifier-resolved argument.

    The action defaults to the originating plugin's action. Unknown
    action names are ignored.
    """
    actions = ACTIONS if actions is None else actions
    action = message.action or get_own_prop(message, "item.plugin.action")

    handler = actions.get(action) if action else None
    if handler is None:
        logger.debug(f"Ignoring execute for unknown action '{action}'")
        return

    handler(message, resolve_arg(message))


def write_clipboard(content: str) -> None:
    """Copy text to the clipboard using wl-copy."""
    try:
        subprocess.Popen(
            ["wl-copy", content],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except FileNotFoundError:
        logger.debug("wl-copy not found, cannot copy to clipboard")


def copy_item(item: ResultItem) -> None:
    """Copy an item's text.copy override, or its arg."""
    content = item.text.get("copy") or item.arg
    if content is None:
        return
    write_clipboard(str(content))
