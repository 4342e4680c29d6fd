"""Native functions registered by the stock host.

These are ordinary consumers of the registration API:

* ``math.add(a, b)`` -- returns ``a + b``.
* ``sys.exit()`` -- asks the host to stop after the current cycle.
* ``sys.print(...)`` -- writes its arguments to stdout on one line.

Registering ``math`` replaces Lua's own ``math`` library inside plugin
contexts.
"""

from __future__ import annotations

from typing import Any

from plughost.messages import ExitRequest, MessageSender
from plughost.output import print_data
from plughost.plugins.registry import NamespaceRegistry


def _number(args: list, index: int, name: str) -> float:
    try:
        value = args[index]
    except IndexError:
        raise ValueError(f"math.add: missing argument '{name}'") from None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"math.add: argument '{name}' must be a number")
    return value


def math_add(sender: MessageSender, args: list) -> Any:
    """Add the first two arguments."""
    return _number(args, 0, "a") + _number(args, 1, "b")


def sys_exit(sender: MessageSender, args: list) -> Any:
    """Send an exit request to the host."""
    sender.send(ExitRequest(True))
    return None


def format_value(value: Any) -> str:
    """Render a Lua value the way ``sys.print`` shows it.

    Tables, functions and other non-scalar values render as an empty string.
    Lua strings arrive already decoded as UTF-8; a string that is not valid
    UTF-8 fails the calling lifecycle function before this is reached.
    """
    if value is None:
        return "[nil]"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, (int, str)):
        return str(value)
    return ""


def sys_print(sender: MessageSender, args: list) -> Any:
    """Print all arguments, concatenated, followed by a newline."""
    print_data("".join(format_value(v) for v in args))
    return None


def register_builtins(registry: NamespaceRegistry) -> None:
    """Register the stock ``math`` and ``sys`` functions in *registry*."""
    registry.register("math", "add", math_add)
    registry.register("sys", "exit", sys_exit)
    registry.register("sys", "print", sys_print)
