"""Output formatting system with strict stdout/stderr discipline.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- primary data only (the asset summaries). This is what
  downstream tools pipe and parse.
* **stderr** -- all diagnostics (status, warnings, errors). Never
  contaminates the data stream.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  absence of a TTY on stderr.

The module exposes two layers:

1. :class:`OutputManager` -- a stateful object holding the output format
   and the Rich stderr console. Created once in
   :func:`~viya4_orders_cli.app.main_callback` and installed via
   :func:`set_output`.
2. Module-level convenience functions (:func:`info`, :func:`warning`,
   :func:`error`) that delegate to the global ``OutputManager``
   instance so callers do not need to pass the manager around.

Asset retrievals may run concurrently (see
:mod:`viya4_orders_cli.assets.fanout`), so :meth:`OutputManager.print_data`
writes each block under a lock.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape


class OutputFormat(str, Enum):
    """Enumeration of supported summary formats.

    ``--output`` accepts ``text``/``t`` and ``json``/``j``; see
    :func:`resolve_format`.
    """

    TEXT = "text"
    JSON = "json"


VALID_FORMATS = ("text", "t", "json", "j")
"""Accepted spellings for the ``--output`` option."""


def resolve_format(value: Optional[str]) -> OutputFormat:
    """Map an ``--output`` value to an :class:`OutputFormat`.

    ``json`` and ``j`` (case-insensitive) select JSON; every other value,
    including ``None``, selects text.
    """
    if value is not None and value.lower() in ("json", "j"):
        return OutputFormat.JSON
    return OutputFormat.TEXT


class OutputManager:
    """Central manager for all CLI output with stdout/stderr discipline.

    Args:
        format: Summary format for data written to stdout.
        no_color: Disable all colour and Rich markup on stderr.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.TEXT,
        no_color: bool = False,
    ) -> None:
        self._format = format
        self._no_color = no_color or _should_disable_color()
        self._lock = threading.Lock()

        # Console for stderr (diagnostics)
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
        )

    @property
    def format(self) -> OutputFormat:
        """The summary format."""
        return self._format

    @property
    def stderr_console(self) -> Console:
        """The Rich console used for diagnostics."""
        return self._stderr

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Print a block of text to stdout in one serialized write.

        Args:
            text: The string to write. A trailing newline is appended if
                missing.
        """
        if not text.endswith("\n"):
            text += "\n"
        with self._lock:
            sys.stdout.write(text)
            sys.stdout.flush()

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Print an informational message to stderr."""
        self._emit(message, escape(message))

    def warning(self, message: str) -> None:
        """Print a yellow warning to stderr."""
        self._emit(f"Warning: {message}", f"[yellow]Warning:[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        """Print a bold-red error to stderr. Never suppressed."""
        self._emit(f"Error: {message}", f"[bold red]Error:[/bold red] {escape(message)}")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _emit(self, plain: str, markup: str) -> None:
        with self._lock:
            if self._no_color:
                print(plain, file=sys.stderr, flush=True)
            else:
                self._stderr.print(markup, highlight=False)


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _should_disable_color() -> bool:
    """Check if color should be disabled per clig.dev.

    Returns True when NO_COLOR env var is set (any value) or TERM=dumb.
    """
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False


def configure_logging(verbose: bool, console: Optional[Console] = None) -> None:
    """Route the standard :mod:`logging` tree for this package to stderr.

    Library modules log through ``logging.getLogger(__name__)``; in verbose
    mode those records are rendered by :class:`rich.logging.RichHandler`,
    otherwise only warnings and above are shown.

    Args:
        verbose: Enable DEBUG level.
        console: Console to render to; defaults to a new stderr console.
    """
    logger = logging.getLogger("viya4_orders_cli")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


# ------------------------------------------------------------------ #
# Global output instance (set during app startup)
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager` instance.

    If no instance has been installed via :func:`set_output`, a default
    text-format ``OutputManager`` is created lazily.
    """
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance."""
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None``.

    Primarily useful in test suites to ensure a clean state between tests.
    """
    global _output
    _output = None


# ------------------------------------------------------------------ #
# Convenience functions that use the global instance
# ------------------------------------------------------------------ #


def info(message: str) -> None:
    """Print info message to stderr via the global OutputManager."""
    get_output().info(message)


def error(message: str) -> None:
    """Print error to stderr via the global OutputManager."""
    get_output().error(message)


def warning(message: str) -> None:
    """Print warning to stderr via the global OutputManager."""
    get_output().warning(message)
