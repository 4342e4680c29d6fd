"""Run command -- load plugins and drive their lifecycle.

``plughost run`` scans the plugin folder, calls ``init()`` in every plugin,
calls ``update()`` until a plugin asks to exit (via ``sys.exit()``) or an
update fails, and finally calls ``destroy()``. Plugin failures are logged;
they never change the exit status.
"""

from __future__ import annotations

from typing import Optional

import typer

from plughost.builtins import register_builtins
from plughost.config import resolve_config
from plughost.host import Host
from plughost.messages import MessageSender, channel
from plughost.models import HostConfig
from plughost.output import debug, info, suggest, warning
from plughost.plugins import PluginManager


def build_manager(config: HostConfig, sender: MessageSender) -> PluginManager:
    """Create a manager with the stock native functions and scan the plugin folder.

    Args:
        config: Effective host configuration.
        sender: Sending half of the host's message channel.

    Returns:
        The manager, scanned. A folder that cannot be listed leaves it empty.
    """
    manager = PluginManager(config.memory_limit, sender)
    register_builtins(manager.registry)
    debug(f"Scanning {config.plugins_dir} for */{config.entrypoint}")
    manager.scan(config.plugins_dir, config.entrypoint)
    return manager


def run_command(
    plugins_dir: Optional[str] = typer.Option(
        None, "--plugins", "-d", help="Folder containing one directory per plugin."
    ),
    entrypoint: Optional[str] = typer.Option(
        None, "--entrypoint", "-e", help="Entry script name inside each plugin directory."
    ),
    memory_limit: Optional[int] = typer.Option(
        None, "--memory-limit", "-m", min=1, help="Per-plugin memory cap in bytes."
    ),
    max_cycles: Optional[int] = typer.Option(
        None, "--max-cycles", min=1, help="Stop after this many update cycles."
    ),
    interval: Optional[float] = typer.Option(
        None, "--interval", min=0.0, help="Seconds to sleep between update cycles."
    ),
    destroy_all: bool = typer.Option(
        False,
        "--destroy-all",
        help="Call destroy() on every plugin even if one fails.",
    ),
) -> None:
    """Load plugins and run init, update and destroy.

    Example::

        plughost run --plugins ./plugins --max-cycles 100
    """
    config = resolve_config(
        plugins_dir=plugins_dir,
        entrypoint=entrypoint,
        memory_limit=memory_limit,
        max_cycles=max_cycles,
        update_interval=interval,
        destroy_all=destroy_all or None,
    )

    sender, receiver = channel()
    manager = build_manager(config, sender)
    if not len(manager):
        warning(f"No plugins found in {config.plugins_dir}")
        suggest(f"Each plugin needs its own directory containing {config.entrypoint}")
        return

    info(f"Loaded {len(manager)} plugin(s)")
    host = Host(
        manager,
        receiver,
        max_cycles=config.max_cycles,
        update_interval=config.update_interval,
        destroy_all=config.destroy_all,
    )
    result = host.run()
    info(f"Stopped after {result.cycles} cycle(s): {result.reason.value}")
