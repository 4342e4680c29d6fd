"""List command -- show which plugins load and how.

Scans the plugin folder exactly like ``plughost run`` would, but only
evaluates each script's top level; no lifecycle function is called.
"""

from __future__ import annotations

from typing import Optional

import typer

from plughost.commands.run import build_manager
from plughost.config import resolve_config
from plughost.messages import channel
from plughost.output import print_table, warning


def list_command(
    plugins_dir: Optional[str] = typer.Option(
        None, "--plugins", "-d", help="Folder containing one directory per plugin."
    ),
    entrypoint: Optional[str] = typer.Option(
        None, "--entrypoint", "-e", help="Entry script name inside each plugin directory."
    ),
    memory_limit: Optional[int] = typer.Option(
        None, "--memory-limit", "-m", min=1, help="Per-plugin memory cap in bytes."
    ),
) -> None:
    """List discovered plugins with their load status.

    Example::

        plughost list --plugins ./plugins
        plughost --json list
    """
    config = resolve_config(
        plugins_dir=plugins_dir, entrypoint=entrypoint, memory_limit=memory_limit
    )
    sender, _ = channel()
    manager = build_manager(config, sender)
    if not len(manager):
        warning(f"No plugins found in {config.plugins_dir}")
        return

    headers = ["id", "status", "memory_used", "error"]
    rows = [[p[h] for h in headers] for p in manager.list_plugins()]
    print_table(headers, rows, title="Plugins")
