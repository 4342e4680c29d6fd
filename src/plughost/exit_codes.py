"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Plugin failures never change the exit code of ``plughost run``; these codes
only classify problems with the host itself (bad configuration, bad
arguments).

Example::

    $ plughost run --memory-limit 0
    $ echo $?
    2   # EXIT_INVALID_USAGE -- the value was rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (including configuration errors)."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_PLUGIN_ERROR = 10
"""The plugin system was misused (e.g. registering after a scan)."""
