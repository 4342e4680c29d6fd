"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for plughost:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.plughost/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Host config** -- A single :class:`~plughost.models.HostConfig` JSON
  file storing defaults (plugin folder, entry script, memory limit).
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and the user config into
  the effective configuration.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from plughost.exceptions import ConfigError
from plughost.models import HostConfig

_APP_NAME = "plughost"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "plughost.json"

ENV_OVERRIDES = {
    "PLUGHOST_PLUGINS_DIR": "plugins_dir",
    "PLUGHOST_ENTRYPOINT": "entrypoint",
    "PLUGHOST_MEMORY_LIMIT": "memory_limit",
}
"""Environment variables and the :class:`HostConfig` field each one overrides."""


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/plughost/`` (default ``~/.config/plughost/``).
    On macOS/Windows: ``~/.plughost/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/plughost/`` (default ``~/.local/share/plughost/``).
    On macOS/Windows: ``~/.plughost/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Host config ---


def _host_config_path() -> Path:
    """Path to the user config file."""
    return get_config_dir() / _CONFIG_FILENAME


def _read_json(path: Path, what: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid {what} at {path}: {exc}") from exc


def load_host_config() -> HostConfig:
    """Load the user configuration from the config directory.

    Returns:
        The deserialised :class:`~plughost.models.HostConfig`, or a default
        instance if the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = _host_config_path()
    if not path.is_file():
        return HostConfig()
    data = _read_json(path, "config")
    try:
        return HostConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_host_config(config: HostConfig) -> None:
    """Persist the user configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_host_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./plughost.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file is not valid JSON or not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(**cli_overrides: Any) -> HostConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flags (keyword arguments; ``None`` values are ignored)
        2. Environment variables (see :data:`ENV_OVERRIDES`)
        3. Project config (``./plughost.json``)
        4. User config (``~/.config/plughost/config.json``)
        5. Defaults

    Args:
        **cli_overrides: :class:`~plughost.models.HostConfig` field values
            taken from the command line.

    Returns:
        The validated :class:`~plughost.models.HostConfig`.

    Raises:
        ConfigError: If any layer is malformed or the merged values fail
            validation.
    """
    data = load_host_config().model_dump(mode="json")

    project = load_project_config()
    if project is not None:
        data.update(project)

    for var, field_name in ENV_OVERRIDES.items():
        value = os.environ.get(var)
        if value:
            data[field_name] = value

    for field_name, value in cli_overrides.items():
        if value is not None:
            data[field_name] = value

    try:
        return HostConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
