"""Namespace registry -- native functions exposed to plugin scripts.

The host builds a :class:`NamespaceRegistry` before any plugin is loaded,
registering handlers under ``(namespace, function_name)`` pairs. When a
plugin context is created, :meth:`NamespaceRegistry.install` turns every
namespace into a Lua table of callables and publishes it as a global, so
a handler registered as ``("math", "add", ...)`` is reachable from Lua as
``math.add(2, 3)``.

A handler is any callable with the signature::

    handler(sender: MessageSender, args: list[Any]) -> Any

``args`` holds the Lua call's arguments in order (Lua ``nil`` arrives as
``None``) and the return value is handed back to Lua as a single value
(``None`` becomes ``nil``). Closures and callable objects may carry their
own state.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from plughost.exceptions import RegistryError
from plughost.messages import MessageSender

logger = logging.getLogger(__name__)

Handler = Callable[[MessageSender, list], Any]
"""Signature of a native function handler."""


class NamespaceRegistry:
    """Ordered mapping of namespace name to ``(function_name, handler)`` pairs.

    Registering the same pair twice is allowed; both entries are kept, and
    the one registered last wins when installed into a context.

    The registry is frozen by the
    :class:`~plughost.plugins.manager.PluginManager` when it starts
    scanning, after which :meth:`register` raises
    :class:`~plughost.exceptions.RegistryError`.

    Example::

        registry = NamespaceRegistry()

        @registry.handler("math", "add")
        def add(sender, args):
            return args[0] + args[1]
    """

    def __init__(self) -> None:
        self._namespaces: dict[str, list[tuple[str, Handler]]] = {}
        self._frozen = False

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, namespace: str, function_name: str, handler: Handler) -> None:
        """Append *handler* under *namespace*, creating the namespace if absent.

        Args:
            namespace: Name of the global Lua table the function lives in.
            function_name: Key of the function inside that table.
            handler: Callable invoked with ``(sender, args)``.

        Raises:
            RegistryError: If the registry has been frozen.
        """
        if self._frozen:
            raise RegistryError(
                f"Cannot register {namespace}.{function_name}: registry is frozen"
            )
        self._namespaces.setdefault(namespace, []).append((function_name, handler))
        logger.debug("Registered native function %s.%s", namespace, function_name)

    def handler(self, namespace: str, function_name: str) -> Callable[[Handler], Handler]:
        """Decorator form of :meth:`register`. Returns the handler unchanged."""

        def decorator(func: Handler) -> Handler:
            self.register(namespace, function_name, func)
            return func

        return decorator

    def freeze(self) -> None:
        """Reject further registrations."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        """Whether :meth:`freeze` has been called."""
        return self._frozen

    # ------------------------------------------------------------------
    # Querying
    # ------------------------------------------------------------------

    def namespaces(self) -> list[str]:
        """Return namespace names in registration order."""
        return list(self._namespaces)

    def functions(self, namespace: str) -> list[tuple[str, Handler]]:
        """Return the ``(function_name, handler)`` pairs of *namespace*, in order."""
        return list(self._namespaces.get(namespace, []))

    def __contains__(self, namespace: object) -> bool:
        return namespace in self._namespaces

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._namespaces.values())

    # ------------------------------------------------------------------
    # Installation
    # ------------------------------------------------------------------

    def install(self, runtime: Any, sender: MessageSender) -> None:
        """Publish every namespace as a global table in *runtime*.

        Each handler is bound to its own clone of *sender*. Entries are
        inserted in registration order, so a duplicated function name ends
        up pointing at the last handler registered for it.

        Args:
            runtime: A ``lupa`` ``LuaRuntime``.
            sender: The sending half of the host's message channel.
        """
        lua_globals = runtime.globals()
        for namespace, entries in self._namespaces.items():
            table = runtime.table()
            for function_name, func in entries:
                table[function_name] = _bind(func, sender.clone())
            lua_globals[namespace] = table


def _bind(func: Handler, sender: MessageSender) -> Callable[..., Any]:
    """Adapt a ``(sender, args)`` handler to a variadic Lua-callable function."""

    def native(*args: Any) -> Any:
        return func(sender, list(args))

    return native
