"""Protocols (interfaces) consumed by the core layer.

The core layer never prints.  Anything it needs to tell the user goes
through one of these contracts, implemented by the CLI layer.
"""

from __future__ import annotations

from typing import Protocol


class CleanUpReporter(Protocol):
    """Contract for announcing clean-up tasks as they are unwound."""

    def report_task(self, description: str) -> None:
        """Announce that the task described by *description* is next.

        Called once per run-stack entry, before the task's callback runs
        (or instead of running it, when only listing).
        """
        ...


class NullReporter:
    """Reporter that discards every announcement."""

    def report_task(self, description: str) -> None:
        return None
