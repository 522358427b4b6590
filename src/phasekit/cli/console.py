"""CLI console helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--version``, ``--usage``) remain
functional even when Rich is not installed.

Progress goes to stdout (:data:`console`), errors to stderr
(:data:`err_console`).
"""

from __future__ import annotations

import sys
from typing import Any

from phasekit.exceptions import EnvironmentError


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


def get_rich_console(stderr: bool = False) -> Any:
    """Create a Rich console instance targeting stdout or stderr."""
    console_class = _load_rich_console_class()
    return console_class(stderr=stderr, soft_wrap=True)


def escape(text: str) -> str:
    """Escape Rich markup in user-supplied *text*."""
    try:
        from rich.markup import escape as rich_escape
    except ModuleNotFoundError:
        return text
    return rich_escape(text)


class _ConsoleProxy:
    """Minimal ``print``-compatible proxy with Rich fallback."""

    def __init__(self, stderr: bool = False) -> None:
        self._stderr = stderr

    def print(self, *objects: object) -> None:
        """Render with Rich when available, else plain print."""
        try:
            rich_console = get_rich_console(stderr=self._stderr)
        except EnvironmentError:
            print(*objects, file=sys.stderr if self._stderr else sys.stdout)
            return
        rich_console.print(*objects)


console = _ConsoleProxy()
err_console = _ConsoleProxy(stderr=True)


class ConsoleReporter:
    """:class:`~phasekit.core.protocols.CleanUpReporter` printing to stdout."""

    def report_task(self, description: str) -> None:
        console.print(f"[cyan] - Clean-up task: [blue]{escape(description)}[/blue][/cyan]")
