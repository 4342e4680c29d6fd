"""Execution context factory -- one sandboxed Lua runtime per plugin.

Every plugin runs in its own ``lupa`` :class:`~lupa.lua54.LuaRuntime`.
Runtimes share nothing: globals, loaded modules and handler closures in
one context are invisible to every other.

The runtime is locked down before any script code runs:

* the memory cap is applied once the namespaces are installed and is
  enforced by Lua's allocator (exceeding it raises
  :class:`~lupa.lua54.LuaMemoryError` in the offending call);
* lupa's ``python`` bridge module is removed from the globals and from
  ``package.loaded``, and ``python.eval`` / ``python.builtins`` are never
  registered;
* attribute access on Python objects reachable from Lua (the native
  handlers) is refused.

CPU time and I/O are not restricted.
"""

from __future__ import annotations

import logging
from typing import Any

from lupa.lua54 import LuaError, LuaRuntime

from plughost.exceptions import ContextError
from plughost.messages import MessageSender
from plughost.plugins.registry import NamespaceRegistry

logger = logging.getLogger(__name__)


def _deny_attribute_access(obj: Any, attr_name: Any, is_setting: bool) -> Any:
    """lupa attribute filter that rejects every Python attribute lookup from Lua."""
    raise AttributeError(f"access to Python attribute '{attr_name}' is not allowed")


def create_context(
    memory_limit: int,
    registry: NamespaceRegistry,
    sender: MessageSender,
) -> LuaRuntime:
    """Create an isolated Lua runtime with *registry* installed.

    Args:
        memory_limit: Hard allocation ceiling in bytes.
        registry: Native functions to expose as namespaced global tables.
        sender: Sending half of the host's message channel; each installed
            handler gets its own clone.

    Returns:
        A fresh ``LuaRuntime`` ready to load a plugin script.

    Raises:
        ContextError: If the runtime cannot be created, cannot enforce
            *memory_limit*, or *memory_limit* does not leave room for the
            installed namespaces.
    """
    # max_memory=0 selects lupa's limiting allocator without a ceiling yet;
    # the cap goes on after setup so a low limit cannot fail unprotected.
    try:
        runtime = LuaRuntime(
            max_memory=0,
            register_eval=False,
            register_builtins=False,
            attribute_filter=_deny_attribute_access,
        )
    except (LuaError, MemoryError, RuntimeError) as exc:
        raise ContextError(f"Cannot create Lua context: {exc}") from exc

    if runtime.get_max_memory() is None:
        raise ContextError(
            f"Lua runtime cannot enforce a memory limit of {memory_limit} bytes"
        )

    try:
        lua_globals = runtime.globals()
        lua_globals["python"] = None
        lua_globals["package"]["loaded"]["python"] = None
        registry.install(runtime, sender)
    except (LuaError, MemoryError) as exc:
        raise ContextError(f"Cannot install native functions: {exc}") from exc

    used = runtime.get_memory_used()
    if memory_limit <= used:
        raise ContextError(
            f"Memory limit of {memory_limit} bytes is below the "
            f"{used} bytes the context already uses"
        )
    try:
        runtime.set_max_memory(memory_limit)
    except (LuaError, RuntimeError) as exc:
        raise ContextError(f"Cannot apply memory limit: {exc}") from exc

    logger.debug("Created Lua context with a %d byte memory limit", memory_limit)
    return runtime
