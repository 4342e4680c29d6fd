"""The :class:`Plugin` record -- one loaded script and its Lua context.

A plugin is a directory under the plugin root containing an entry script.
Its id is the directory name, never anything read from the script. The
plugin owns its ``LuaRuntime`` exclusively; the runtime lives exactly as
long as the :class:`Plugin` does.

Loading never rejects a plugin because its top-level code failed: the
failure is recorded in :attr:`Plugin.status` and :attr:`Plugin.error` so
operators (and tests) can see it, and the plugin stays registered.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from plughost.exceptions import LifecycleError


class LoadStatus(str, Enum):
    """Outcome of evaluating a plugin's top-level script body."""

    LOADED = "loaded"
    FAILED = "failed"


@dataclass
class Plugin:
    """A loaded plugin.

    Attributes:
        id: Name of the directory the plugin was loaded from.
        path: Path of the entry script.
        runtime: The plugin's private ``lupa`` ``LuaRuntime``.
        status: Whether the top-level script body evaluated cleanly.
        error: The evaluation error message when ``status`` is
            :attr:`LoadStatus.FAILED`, otherwise ``None``.
    """

    id: str
    path: Path
    runtime: Any
    status: LoadStatus = LoadStatus.LOADED
    error: Optional[str] = None

    @property
    def loaded(self) -> bool:
        """``True`` when the top-level script body ran without error."""
        return self.status == LoadStatus.LOADED

    @property
    def memory_used(self) -> int:
        """Bytes currently allocated by the plugin's Lua state."""
        return self.runtime.get_memory_used()

    def call(self, function_name: str) -> Any:
        """Call the global Lua function *function_name* with no arguments.

        Args:
            function_name: Name of a global defined by the script.

        Returns:
            Whatever the function returned (``None`` for no value).

        Raises:
            LifecycleError: If the global is not defined.
            lupa.lua54.LuaError: If the call itself fails, including
                :class:`~lupa.lua54.LuaMemoryError` when the memory cap
                is exceeded. Exceptions raised by native handlers
                propagate unchanged.
        """
        func = self.runtime.globals()[function_name]
        if func is None:
            raise LifecycleError(f"function '{function_name}' is not defined")
        return func()
