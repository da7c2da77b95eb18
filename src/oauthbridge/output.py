"""Terminal output for the diagnostic CLI.

Data (authorization URLs, normalized profiles, provider tables) is written
to stdout and everything else to stderr, so ``oauthbridge authorize github``
can be piped straight into another program. Rich styling is only used when
stdout is a terminal and colour is not disabled by ``NO_COLOR``,
``TERM=dumb`` or ``--no-color``.

:class:`OutputManager` is created once in :func:`~oauthbridge.app.main_callback`
and installed with :func:`set_output`; commands use the module-level
helpers, which delegate to the installed instance.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Output formats selectable from the command line.

    ``AUTO`` becomes ``RICH`` on an interactive terminal with colour
    enabled, and ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


# level -> (plain template, rich markup template)
_DIAGNOSTICS: dict[str, tuple[str, str]] = {
    "info": ("{}", "{}"),
    "success": ("{}", "[green]{}[/green]"),
    "warning": ("Warning: {}", "[yellow]Warning:[/yellow] {}"),
    "error": ("Error: {}", "[bold red]Error:[/bold red] {}"),
    "debug": ("[debug] {}", "[dim]\\[debug] {}[/dim]"),
}

_QUIET_LEVELS = frozenset({"info", "success"})


class OutputManager:
    """Write command results and diagnostics in the selected format.

    Args:
        format: Requested format; ``AUTO`` is resolved immediately.
        no_color: Disable colour and markup on both streams.
        quiet: Drop ``info`` and ``success`` diagnostics.
        verbose: Show ``debug`` diagnostics.
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

        if format == OutputFormat.AUTO:
            format = OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # --- stdout ---

    def write(self, text: str) -> None:
        """Write one line of raw text to stdout."""
        print(text, file=sys.stdout, flush=True)

    def render(self, data: Any) -> None:
        """Write a JSON-compatible value to stdout.

        Plain mode writes one ``key<TAB>value`` line per top-level key of a
        mapping (nested values as compact JSON) and one line per item of a
        list.
        """
        if self._format == OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.write(line)
            return

        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format == OutputFormat.JSON:
            self.write(text)
        else:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))

    def render_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write rows to stdout.

        JSON mode emits a list of objects keyed by header, plain mode
        tab-separated lines with a header line first.
        """
        if self._format == OutputFormat.JSON:
            self.write(json.dumps([dict(zip(headers, row)) for row in rows], indent=2))
            return

        if self._format == OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self.write("\t".join(row))
            return

        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*(escape(cell) for cell in row))
        self._stdout.print(table)

    # --- stderr ---

    def diagnose(self, level: str, message: str) -> None:
        """Write a diagnostic at *level* (``info``, ``success``, ``warning``,
        ``error`` or ``debug``) to stderr."""
        if level in _QUIET_LEVELS and self._quiet:
            return
        if level == "debug" and not self._verbose:
            return

        plain, markup = _DIAGNOSTICS[level]
        if self._no_color:
            print(plain.format(message), file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup.format(escape(message)))

    def info(self, message: str) -> None:
        self.diagnose("info", message)

    def success(self, message: str) -> None:
        self.diagnose("success", message)

    def warning(self, message: str) -> None:
        self.diagnose("warning", message)

    def error(self, message: str) -> None:
        self.diagnose("error", message)

    def debug(self, message: str) -> None:
        self.diagnose("debug", message)


def _plain_lines(data: Any) -> list[str]:
    if isinstance(data, dict):
        return [f"{key}\t{_plain_value(value)}" for key, value in data.items()]
    if isinstance(data, list):
        return [_plain_value(item) for item in data]
    return [_plain_value(data)]


def _plain_value(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set to anything or ``TERM`` is ``dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one if needed."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed :class:`OutputManager`."""
    global _output
    _output = None


def write(text: str) -> None:
    get_output().write(text)


def render(data: Any) -> None:
    get_output().render(data)


def render_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().render_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
