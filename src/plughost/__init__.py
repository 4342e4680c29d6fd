"""plughost -- Run sandboxed Lua plugins discovered on disk.

This package hosts a set of Lua scripts ("plugins"), each in its own
isolated interpreter with an enforced memory cap. The host injects
namespaced native functions into every plugin, drives a fixed
``init`` / ``update`` / ``destroy`` lifecycle across all of them, and
listens for control messages that scripts send back through those
native functions.

Typical workflow::

    plughost list --plugins ./plugins     # show what would be loaded
    plughost run --plugins ./plugins      # run the lifecycle loop

Modules:
    app: Typer application factory and CLI entry point.
    host: The control loop that drives the plugin lifecycle.
    messages: Host-bound control messages and the message channel.
    builtins: Native functions registered by the stock host.
    models: Pydantic models for the host configuration.
    config: XDG-aware configuration loading and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
