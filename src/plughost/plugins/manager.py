"""Plugin manager -- discovery, loading, and lifecycle management.

This module contains :class:`PluginManager`, the central coordinator for the
plugin system. It owns the :class:`~plughost.plugins.registry.NamespaceRegistry`
of native functions, discovers plugin directories on disk, gives each one its
own sandboxed Lua context, and calls lifecycle functions across every loaded
plugin.

Plugins live one per directory under a root folder::

    plugins/
        hello/
            main.lua
        counter/
            main.lua

Each directory name becomes the plugin id. Scripts may define any of the
global functions ``init``, ``update`` and ``destroy``; the host calls them
through :meth:`PluginManager.invoke_all`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from plughost.exceptions import PluginError
from plughost.messages import MessageSender, channel
from plughost.models import DEFAULT_MEMORY_LIMIT
from plughost.plugins.base import LoadStatus, Plugin
from plughost.plugins.context import create_context
from plughost.plugins.registry import Handler, NamespaceRegistry

logger = logging.getLogger(__name__)


def _describe(exc: BaseException) -> str:
    """Return the message of *exc*, or its type name when the message is empty."""
    return str(exc) or type(exc).__name__


class PluginManager:
    """Discovers, loads, and drives the lifecycle of Lua plugins.

    Native functions must be registered (via :meth:`handle` or directly on
    :attr:`registry`) before the first :meth:`scan`; scanning freezes the
    registry so every context sees the same set of functions.

    Plugins are keyed by id. Loading a plugin whose id is already present
    replaces the earlier one without warning.

    Example:
        Typical usage::

            sender, receiver = channel()
            manager = PluginManager(2_048_000, sender)
            manager.handle("sys", "exit", lambda tx, args: tx.send(ExitRequest(True)))
            manager.scan("./plugins", "main.lua")
            manager.invoke_all("init")

    Args:
        memory_limit: Per-plugin Lua memory cap in bytes.
        sender: Sending half of the host's message channel. A private
            channel is created when omitted, so messages go nowhere.
        registry: Native functions to install; a new empty registry when
            omitted.
    """

    def __init__(
        self,
        memory_limit: int = DEFAULT_MEMORY_LIMIT,
        sender: Optional[MessageSender] = None,
        registry: Optional[NamespaceRegistry] = None,
    ) -> None:
        if sender is None:
            sender, _ = channel()
        self.memory_limit = memory_limit
        self.sender = sender
        self.registry = registry if registry is not None else NamespaceRegistry()
        self._plugins: dict[str, Plugin] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def handle(self, namespace: str, function_name: str, handler: Handler) -> None:
        """Register a native function; shorthand for ``registry.register``.

        Raises:
            RegistryError: If called after :meth:`scan`.
        """
        self.registry.register(namespace, function_name, handler)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def scan(self, folder: str | Path, entrypoint: str) -> bool:
        """Load every plugin directory directly under *folder*.

        Entries are visited in name order. Non-directories and directories
        without an *entrypoint* file are skipped. A plugin whose context or
        source cannot be set up is logged and skipped; one whose top-level
        code raises is still loaded, with the error recorded on the
        :class:`~plughost.plugins.base.Plugin`.

        Args:
            folder: The plugin root folder. Not searched recursively.
            entrypoint: File name of the entry script inside each plugin
                directory (e.g. ``"main.lua"``).

        Returns:
            ``False`` if *folder* itself could not be listed, ``True``
            otherwise, regardless of how individual plugins fared.
        """
        self.registry.freeze()
        root = Path(folder)
        try:
            entries = sorted(root.iterdir(), key=lambda p: p.name)
        except OSError as exc:
            logger.error("Unable to scan folder %s for plugins: %s", root, exc)
            return False

        for entry in entries:
            if not entry.is_dir():
                logger.debug("Skipping '%s': not a directory", entry.name)
                continue

            script_path = entry / entrypoint
            if not script_path.is_file():
                logger.debug("Skipping '%s': no %s found", entry.name, entrypoint)
                continue

            plugin = self.load_plugin(entry.name, script_path)
            if plugin is not None:
                self._plugins[plugin.id] = plugin

        return True

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_plugin(self, plugin_id: str, script_path: Path) -> Optional[Plugin]:
        """Create a context for one plugin and evaluate its entry script.

        Args:
            plugin_id: The id to give the plugin (its directory name).
            script_path: Path of the entry script.

        Returns:
            The new :class:`~plughost.plugins.base.Plugin`, or ``None`` if
            the context could not be created or the script could not be
            read. The plugin is not stored; :meth:`scan` does that.
        """
        try:
            runtime = create_context(self.memory_limit, self.registry, self.sender)
        except PluginError as exc:
            logger.error("Couldn't create Lua context for plugin '%s': %s", plugin_id, exc)
            return None

        try:
            source = script_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Unable to load script %s: %s", script_path, exc)
            return None

        plugin = Plugin(id=plugin_id, path=script_path, runtime=runtime)
        try:
            runtime.execute(source)
        except Exception as exc:
            plugin.status = LoadStatus.FAILED
            plugin.error = _describe(exc)
            logger.warning("[%s] top-level evaluation failed: %s", plugin_id, plugin.error)
        else:
            logger.info("Loaded plugin '%s' from %s", plugin_id, script_path)
        return plugin

    # ------------------------------------------------------------------
    # Querying
    # ------------------------------------------------------------------

    def get_plugin(self, plugin_id: str) -> Plugin:
        """Retrieve a loaded plugin by id.

        Raises:
            PluginError: If no plugin with the given id is loaded.
        """
        try:
            return self._plugins[plugin_id]
        except KeyError:
            raise PluginError(f"Plugin '{plugin_id}' is not loaded") from None

    @property
    def plugins(self) -> dict[str, Plugin]:
        """A copy of the id to plugin mapping, in load order."""
        return dict(self._plugins)

    def list_plugins(self) -> list[dict[str, str]]:
        """List loaded plugins with their load diagnostics.

        Returns:
            A list of dicts with ``"id"``, ``"status"``, ``"error"``,
            ``"memory_used"`` and ``"path"`` keys, all as strings.
        """
        return [
            {
                "id": plugin.id,
                "status": plugin.status.value,
                "error": plugin.error or "",
                "memory_used": str(plugin.memory_used),
                "path": str(plugin.path),
            }
            for plugin in self._plugins.values()
        ]

    def __len__(self) -> int:
        return len(self._plugins)

    def __contains__(self, plugin_id: object) -> bool:
        return plugin_id in self._plugins

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def invoke_all(self, function_name: str, fail_fast: bool = True) -> bool:
        """Call the global *function_name* in every loaded plugin.

        Plugins are visited in load order. Any failure (an undefined
        function, a Lua runtime error, an exhausted memory cap, or an
        exception from a native handler) is logged as ``[<id>] <error>``.

        Args:
            function_name: Name of the zero-argument global Lua function.
            fail_fast: Stop at the first failing plugin, leaving the rest
                uncalled for this pass. When ``False`` every plugin is
                called regardless.

        Returns:
            ``True`` if every visited plugin succeeded.
        """
        ok = True
        for plugin in list(self._plugins.values()):
            try:
                plugin.call(function_name)
            except Exception as exc:
                logger.error("[%s] %s", plugin.id, _describe(exc))
                ok = False
                if fail_fast:
                    return False
        return ok

    def init(self) -> bool:
        """Call ``init()`` in every plugin. See :meth:`invoke_all`."""
        return self.invoke_all("init")

    def update(self) -> bool:
        """Call ``update()`` in every plugin. See :meth:`invoke_all`."""
        return self.invoke_all("update")

    def destroy(self, fail_fast: bool = True) -> bool:
        """Call ``destroy()`` in every plugin. See :meth:`invoke_all`."""
        return self.invoke_all("destroy", fail_fast=fail_fast)
