"""Shared test fixtures for plughost.

Provides reusable fixtures for building plugin folders on disk, creating
isolated config environments, managing output and logging state, and
running CLI commands. These fixtures are automatically discovered by pytest.
"""

from __future__ import annotations

import logging
import textwrap
from pathlib import Path
from typing import Callable

import pytest

from plughost.messages import MessageReceiver, MessageSender, channel
from plughost.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output and logging state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and the ``plughost`` logger after every test.

    The OutputManager and the Rich log handler cache references to
    sys.stdout/sys.stderr at creation time. When Typer's CliRunner
    redirects those streams and the test finishes, the cached references
    become stale. Resetting forces fresh ones on next use.
    """
    yield
    reset_output()
    logger = logging.getLogger("plughost")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Plugin folder fixtures
# ---------------------------------------------------------------------------


PluginWriter = Callable[..., Path]


@pytest.fixture
def plugin_root(tmp_path: Path) -> Path:
    """An empty plugin root folder."""
    root = tmp_path / "plugins"
    root.mkdir()
    return root


@pytest.fixture
def write_plugin(plugin_root: Path) -> PluginWriter:
    """Factory writing ``<root>/<name>/<entrypoint>`` with dedented Lua source.

    Usage::

        write_plugin("alpha", "function init() end")
        write_plugin("beta", "...", root=other_root, entrypoint="init.lua")
    """

    def _write(
        name: str,
        source: str,
        root: Path | None = None,
        entrypoint: str = "main.lua",
    ) -> Path:
        plugin_dir = (root or plugin_root) / name
        plugin_dir.mkdir(parents=True, exist_ok=True)
        script = plugin_dir / entrypoint
        script.write_text(textwrap.dedent(source), encoding="utf-8")
        return script

    return _write


@pytest.fixture
def message_channel() -> tuple[MessageSender, MessageReceiver]:
    """A fresh ``(sender, receiver)`` pair."""
    return channel()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path,
    clears all PLUGHOST_* environment variables, and changes the working
    directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("plughost.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "PLUGHOST_PLUGINS_DIR",
        "PLUGHOST_ENTRYPOINT",
        "PLUGHOST_MEMORY_LIMIT",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def plain_output() -> OutputManager:
    """Install a PLAIN-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
