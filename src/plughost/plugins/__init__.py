"""Plugin system for plughost -- discovery, sandboxing, and lifecycle calls.

Each plugin is a Lua script in its own directory, loaded into a private
``lupa`` runtime with a memory cap. Native Python functions registered in
a :class:`NamespaceRegistry` are exposed to every script as global tables.

Key classes:

* :class:`NamespaceRegistry` -- native functions grouped by namespace.
* :class:`PluginManager` -- discovers plugins and calls lifecycle functions.
* :class:`Plugin` -- one loaded script with its runtime and load status.
* :class:`LoadStatus` -- whether a script's top-level body ran cleanly.

Example:
    Typical usage from the host::

        from plughost.plugins import PluginManager

        manager = PluginManager(2_048_000, sender)
        manager.handle("math", "add", lambda tx, args: args[0] + args[1])
        manager.scan("./plugins", "main.lua")
        manager.invoke_all("init")
"""

from plughost.plugins.base import LoadStatus, Plugin
from plughost.plugins.context import create_context
from plughost.plugins.manager import PluginManager
from plughost.plugins.registry import Handler, NamespaceRegistry

__all__ = [
    "Handler",
    "LoadStatus",
    "NamespaceRegistry",
    "Plugin",
    "PluginManager",
    "create_context",
]
