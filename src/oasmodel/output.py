"""Terminal output for the ``oasmodel`` command line.

Data and diagnostics never share a stream:

* **stdout** carries what the user asked for -- converted documents,
  tables, structured summaries -- so it can be piped or redirected with
  ``-o``.
* **stderr** carries everything else: status lines, warnings, errors and
  log records.

Rendering is chosen once per run. ``AUTO`` becomes Rich when stdout is a
terminal and colour is allowed, plain text otherwise; ``--json`` and
``--plain`` force a mode. Colour is disabled by ``--no-color``,
``NO_COLOR`` (any value) or ``TERM=dumb``.

Commands call the module-level helpers (:func:`print_table`, :func:`info`,
...), which forward to the :class:`OutputManager` installed by
:func:`~oasmodel.app.main_callback`. :func:`configure_logging` sends the
``oasmodel`` logger hierarchy to the same stderr console.
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

_LOGGER_NAME = "oasmodel"
_SYNTAX_THEME = "monokai"


class OutputFormat(str, Enum):
    """Rendering modes for data written to stdout."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``True`` when ``NO_COLOR`` is set (even empty) or ``TERM`` is ``dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


class OutputManager:
    """Routes command output to stdout or stderr in the active format.

    Args:
        format: Requested mode; ``AUTO`` is resolved here, once.
        no_color: Strip colour and markup from both streams.
        quiet: Drop ``info`` and ``success`` messages. Warnings, errors and
            stdout data are always written.
        output_file: Write stdout data to this path instead. The file is
            truncated by the first write of the run and appended to after
            that.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        output_file: Optional[str] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._output_file = output_file
        self._file_opened = False

        if format is OutputFormat.AUTO:
            use_rich = _is_tty() and not self._no_color
            format = OutputFormat.RICH if use_rich else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format is OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def stderr_console(self) -> Console:
        """Console for diagnostics; the logging handler writes here too."""
        return self._stderr

    @property
    def _rich_stdout(self) -> bool:
        return self._format is OutputFormat.RICH and not self._output_file

    # --- stdout ---

    def print_data(self, text: str) -> None:
        """Write *text* as one block of data, newline-terminated."""
        if not self._output_file:
            print(text.rstrip("\n"), file=sys.stdout, flush=True)
            return
        mode = "a" if self._file_opened else "w"
        with open(self._output_file, mode, encoding="utf-8") as f:
            f.write(text if text.endswith("\n") else text + "\n")
        self._file_opened = True

    def print_document(self, text: str, lexer: str) -> None:
        """Write a serialised document; highlighted with *lexer* in Rich mode."""
        if self._rich_stdout:
            self._stdout.print(Syntax(text.rstrip("\n"), lexer, theme=_SYNTAX_THEME, word_wrap=True))
        else:
            self.print_data(text)

    def format_response(self, data: Any) -> None:
        """Write a dict or list: JSON text, ``key<TAB>value`` lines, or highlighted JSON."""
        if self._format is OutputFormat.JSON or self._output_file:
            self.print_data(_to_json(data))
        elif self._format is OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
        else:
            self._stdout.print(Syntax(_to_json(data), "json", theme=_SYNTAX_THEME, word_wrap=True))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write rows under *headers*.

        JSON mode emits a list of objects keyed by header; plain mode emits
        tab-separated lines with the header first; Rich mode draws a table
        with *title* above it.
        """
        if self._format is OutputFormat.JSON:
            self.print_data(_to_json([dict(zip(headers, row)) for row in rows]))
        elif not self._rich_stdout:
            for cells in [headers, *rows]:
                self.print_data("\t".join(cells))
        else:
            table = Table(title=title, header_style="bold cyan")
            for header in headers:
                table.add_column(header)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    # --- stderr ---

    def _diagnostic(self, message: str, prefix: str = "", style: str = "") -> None:
        if self._no_color:
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
        elif style and prefix:
            self._stderr.print(f"[{style}]{prefix}[/{style}]{message}")
        elif style:
            self._stderr.print(f"[{style}]{message}[/{style}]")
        else:
            self._stderr.print(message)

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, style="green")

    def warning(self, message: str) -> None:
        self._diagnostic(message, prefix="Warning: ", style="yellow")

    def error(self, message: str) -> None:
        self._diagnostic(message, prefix="Error: ", style="bold red")


def _plain_lines(data: Any) -> list[str]:
    if isinstance(data, dict):
        lines = []
        for key, value in data.items():
            if isinstance(value, (dict, list)):
                value = json.dumps(value, ensure_ascii=False, default=str)
            lines.append(f"{key}\t{value}")
        return lines
    if isinstance(data, list):
        return [
            "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
            for item in data
        ]
    return [str(data)]


def configure_logging(verbose: bool, console: Optional[Console] = None) -> logging.Logger:
    """Send ``oasmodel.*`` log records to a Rich handler on stderr.

    Only warnings and above are shown unless *verbose* is set, in which
    case debug records (loading, reference chains, validation counts) are
    shown with their source location. A previous Rich handler is replaced.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    for old in [h for h in logger.handlers if isinstance(h, RichHandler)]:
        logger.removeHandler(old)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
    return logger


# --- Process-wide manager ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """The installed manager; a default one is created on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (tests swap stdout between runs)."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_document(text: str, lexer: str) -> None:
    get_output().print_document(text, lexer)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)
