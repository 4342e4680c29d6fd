"""The ``plughost`` command line.

``run`` drives plugins through their lifecycle, ``list`` loads them and
reports how loading went, and ``config`` edits the stored settings.

:func:`main` is the console script. A :class:`~plughost.exceptions.PlugHostError`
escaping a command becomes an error line and its exit code. Anything else
leaves a traceback in ``<data dir>/logs`` and exits with status 1.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from plughost import __version__
from plughost.commands.config import config_app
from plughost.commands.list_plugins import list_command
from plughost.commands.run import run_command
from plughost.config import get_data_dir, load_host_config
from plughost.exceptions import ConfigError, PlugHostError
from plughost.exit_codes import EXIT_GENERIC_FAILURE
from plughost.output import OutputFormat, OutputManager, error, set_output


app = typer.Typer(
    name="plughost",
    help="Run sandboxed Lua plugins.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("run")(run_command)
app.command("list")(list_command)
app.add_typer(config_app, name="config", help="Show or change stored settings.")


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"plughost {__version__}")
        raise typer.Exit()


def _stored_format() -> OutputFormat:
    """The ``output.format`` saved with ``config set``.

    An unreadable config falls back to ``auto``; commands that load the
    config report the problem themselves.
    """
    try:
        return OutputFormat(load_host_config().output.format)
    except ConfigError:
        return OutputFormat.AUTO


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Print the version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="Write data as JSON."),
    plain_output: bool = typer.Option(
        False, "--plain", help="Write data as tab-separated text."
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Turn colour off."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only print data, warnings and errors."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Print debug messages and log records."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Do not ask before destructive changes."
    ),
) -> None:
    """Set up output and logging before the sub-command runs.

    ``--json`` and ``--plain`` override the stored ``output.format``.
    """
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = _stored_format()

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    output.configure_logging()

    ctx.ensure_object(dict)
    ctx.obj.update(force=force, verbose=verbose)


def _exit_on_interrupt(signum: int, frame: Any) -> None:
    sys.stderr.write("\nCancelled.\n")
    sys.exit(130)


def _write_crash_log() -> str:
    """Save the traceback being handled and return where it went."""
    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """Console script entry point; always ends in ``SystemExit``."""
    signal.signal(signal.SIGINT, _exit_on_interrupt)
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        _exit_on_interrupt(signal.SIGINT, None)
    except PlugHostError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception:
        error(f"Unexpected error. Debug log: {_write_crash_log()}")
        sys.exit(EXIT_GENERIC_FAILURE)
