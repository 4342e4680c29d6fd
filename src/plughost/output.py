"""Terminal output for the ``plughost`` CLI.

Data goes to stdout, everything else to stderr:

* stdout carries what a caller may pipe: the ``list`` table, the
  ``config show`` document, and text plugins emit with ``sys.print``.
* stderr carries status lines, warnings, errors and log records.

The data format is JSON, tab-separated plain text, or Rich. ``auto`` picks
Rich for an interactive terminal with colour enabled and plain text
otherwise. Colour is off when ``--no-color`` is given, ``NO_COLOR`` is set,
or ``TERM=dumb``.

Commands do not pass an :class:`OutputManager` around. The root callback
installs one with :func:`set_output` and the module-level functions below
forward to it.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """How data written to stdout is rendered."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Renders data on stdout and diagnostics on stderr.

    Args:
        format: Data format; ``AUTO`` is resolved once, here.
        no_color: Strip colour and markup from both streams.
        quiet: Drop informational stderr lines; warnings and errors stay.
        verbose: Show debug lines and DEBUG log records.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format != OutputFormat.AUTO:
            self._format = format
        elif _is_tty() and not self._no_color:
            self._format = OutputFormat.RICH
        else:
            self._format = OutputFormat.PLAIN

        rich = self._format == OutputFormat.RICH
        self._stdout = Console(file=sys.stdout, no_color=self._no_color, force_terminal=rich)
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    def configure_logging(self) -> None:
        """Attach a Rich handler for the ``plughost`` logger to stderr.

        ``--verbose`` lowers the level to DEBUG and ``--quiet`` raises it to
        ERROR. A handler installed by an earlier call is replaced.
        """
        logger = logging.getLogger("plughost")
        for handler in list(logger.handlers):
            if getattr(handler, "_plughost_handler", False):
                logger.removeHandler(handler)

        handler = RichHandler(
            console=self._stderr,
            show_time=False,
            show_path=self._verbose,
            markup=False,
            rich_tracebacks=False,
        )
        handler._plughost_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
        if self._verbose:
            logger.setLevel(logging.DEBUG)
        elif self._quiet:
            logger.setLevel(logging.ERROR)
        else:
            logger.setLevel(logging.INFO)

    # stdout

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def format_response(self, data: Any) -> None:
        """Write a dict, list or scalar to stdout in the active format."""
        if self._format == OutputFormat.JSON:
            self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))
        elif self._format == OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
        elif isinstance(data, (dict, list)):
            document = json.dumps(data, indent=2, ensure_ascii=False, default=str)
            self._stdout.print(Syntax(document, "json", theme="monokai", word_wrap=True))
        else:
            self._stdout.print(str(data))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write rows to stdout.

        JSON renders one object per row keyed by header. Plain renders a
        header line and one tab-separated line per row. *title* is only
        shown by Rich.
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
            return
        if self._format == OutputFormat.PLAIN:
            for cells in [headers, *rows]:
                self.print_data("\t".join(cells))
            return

        table = Table(title=title, show_header=True, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # stderr

    def _diagnose(self, prefix: str, message: str, style: Optional[str]) -> None:
        if self._no_color or style is None:
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[{style}]{prefix}[/{style}]{message}")

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnose("", message, None)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnose(message, "", "green")

    def warning(self, message: str) -> None:
        self._diagnose("Warning: ", message, "yellow")

    def error(self, message: str) -> None:
        self._diagnose("Error: ", message, "bold red")

    def suggest(self, message: str) -> None:
        """Hint at a next step, e.g. a command to try."""
        if not self._quiet:
            self._diagnose(f"→ {message}", "", "dim")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnose(f"[debug] {message}", "", "dim")


def _plain_lines(data: Any) -> list[str]:
    """Flatten *data* to tab-separated lines; nested dicts stay JSON."""
    if isinstance(data, dict):
        lines = []
        for key, value in data.items():
            if isinstance(value, dict):
                value = json.dumps(value, ensure_ascii=False, default=str)
            lines.append(f"{key}\t{value}")
        return lines
    if isinstance(data, list):
        return [
            "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
            for item in data
        ]
    return [str(data)]


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` set to anything, or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """The installed :class:`OutputManager`, or a default one."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager. Tests call this between cases."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_table(
    headers: list[str],
    rows: list[list[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)
