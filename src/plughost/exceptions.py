"""Exception hierarchy for plughost.

All exceptions inherit from :class:`PlugHostError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`plughost.exit_codes`.
The top-level error handler in :func:`plughost.app.main` catches
``PlugHostError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Errors raised by plugin *scripts* are not part of this hierarchy: the
:class:`~plughost.plugins.manager.PluginManager` logs them and reports a
boolean instead.

Subclass hierarchy::

    PlugHostError (exit 1)
    +-- ConfigError         (exit 1)
    +-- PluginError         (exit 10)
        +-- RegistryError
        +-- ContextError
        +-- LifecycleError
"""

from plughost.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_PLUGIN_ERROR,
)


class PlugHostError(Exception):
    """Base exception for all plughost errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(PlugHostError):
    """Raised for configuration problems (invalid JSON, out-of-range values)."""

    exit_code = EXIT_GENERIC_FAILURE


class PluginError(PlugHostError):
    """Base class for plugin system errors."""

    exit_code = EXIT_PLUGIN_ERROR


class RegistryError(PluginError):
    """Raised when a native function is registered after the registry was frozen."""


class ContextError(PluginError):
    """Raised when a Lua context cannot be created or cannot enforce its memory limit."""


class LifecycleError(PluginError):
    """Raised when a lifecycle function is missing or is not callable."""
