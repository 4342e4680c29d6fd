"""Pydantic models for the plughost configuration.

The configuration is serialised as JSON in the user's config directory
(see :mod:`plughost.config`) and may be overridden by a project-local
``plughost.json``, environment variables, and CLI flags.

All models use Pydantic v2. Validation failures surface as
:class:`~plughost.exceptions.ConfigError` from the loading functions.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


DEFAULT_MEMORY_LIMIT = 2_048_000
"""Default per-plugin Lua memory cap in bytes."""


class OutputConfig(BaseModel):
    """Output preferences; ``format`` applies when neither ``--json`` nor ``--plain`` is given."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class HostConfig(BaseModel):
    """Top-level host configuration.

    Persisted by :func:`~plughost.config.save_host_config` and resolved
    against overrides by :func:`~plughost.config.resolve_config`.

    Example::

        HostConfig(plugins_dir="./plugins", entrypoint="main.lua")
    """

    plugins_dir: str = Field(
        default="./plugins",
        description="Folder containing one subdirectory per plugin",
    )
    entrypoint: str = Field(
        default="main.lua",
        description="Script file name expected at the top of each plugin directory",
    )
    memory_limit: int = Field(
        default=DEFAULT_MEMORY_LIMIT,
        gt=0,
        description="Per-plugin Lua memory cap in bytes",
    )
    max_cycles: Optional[int] = Field(
        default=None,
        gt=0,
        description="Stop after this many update cycles (unbounded when unset)",
    )
    update_interval: float = Field(
        default=0.0,
        ge=0.0,
        description="Seconds to sleep between update cycles",
    )
    destroy_all: bool = Field(
        default=False,
        description="Call destroy() on every plugin even if one of them fails",
    )
    output: OutputConfig = Field(default_factory=OutputConfig)
