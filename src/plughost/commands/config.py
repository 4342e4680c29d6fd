"""Config commands -- view and modify the user configuration.

Provides the ``plughost config`` sub-command group for reading, updating,
and resetting the persisted :class:`~plughost.models.HostConfig`.
"""

from __future__ import annotations

import typer

from plughost.exit_codes import EXIT_INVALID_USAGE
from plughost.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the persisted configuration.

    Example::

        plughost config show
        plughost --json config show
    """
    from plughost.config import get_config_dir, load_host_config

    config = load_host_config()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'output.format')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    The value is coerced to the type of the field it replaces and the result
    is validated against :class:`~plughost.models.HostConfig` before saving.
    Fields that are unset (``null``) accept the raw string and rely on
    validation to convert it.

    Example::

        plughost config set plugins_dir ./scripts
        plughost config set memory_limit 4096000
        plughost config set destroy_all true
    """
    from pydantic import ValidationError

    from plughost.config import load_host_config, save_host_config
    from plughost.models import HostConfig

    data = load_host_config().model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    current = target[final_key]
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    elif isinstance(current, float):
        try:
            coerced = float(value)
        except ValueError:
            error(f"Expected number for {key}, got: {value}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    else:
        coerced = value  # type: ignore[assignment]

    target[final_key] = coerced

    try:
        new_config = HostConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_host_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Reset configuration to defaults.

    Asks for confirmation unless ``--force`` is active.

    Example::

        plughost --force config reset
    """
    from plughost.config import save_host_config
    from plughost.models import HostConfig

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_host_config(HostConfig())
    success("Configuration reset to defaults.")
