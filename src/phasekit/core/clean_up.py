"""Clean-up task registry: a small stack-based undo system.

Application code registers undo actions once, up front, and then
schedules / unschedules them as it acquires and releases resources.
When a phase fails, the pending actions can be unwound in LIFO order.

Guarantees
----------
* Unknown handles fail fast, synchronously, with
  :class:`~phasekit.exceptions.UnknownTaskError`.
* :meth:`TaskRegistry.clean_up` runs tasks strictly one after another,
  most recently scheduled first, and stops at the first failure.
* No ``print()``; announcements go through an injected
  :class:`~phasekit.core.protocols.CleanUpReporter`.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any, TypeVar

from phasekit.core.models import Phase, RegisteredTask, TaskCallback, TaskHandle
from phasekit.core.protocols import CleanUpReporter, NullReporter
from phasekit.exceptions import UnknownTaskError

T = TypeVar("T")

CLEAN_UP_PHASE_ID: str = "X"
CLEAN_UP_PHASE_DESCRIPTION: str = "Trying to clean up the mess"
CLEAN_UP_PHASE_ERROR: str = "Failed to clean up everything."


async def _resolve(value: Any) -> Any:
    """Await *value* when it is awaitable, else return it as is."""
    if inspect.isawaitable(value):
        return await value
    return value


class TaskRegistry:
    """Ledger of undo actions and the stack of currently pending ones.

    Parameters
    ----------
    reporter:
        Receives the description of every task as it is unwound.
        Defaults to a reporter that discards everything.
    """

    def __init__(self, reporter: CleanUpReporter | None = None) -> None:
        self._reporter: CleanUpReporter = reporter or NullReporter()
        self._tasks: dict[TaskHandle, RegisteredTask] = {}
        self._scheduled: list[RegisteredTask] = []

    @property
    def reporter(self) -> CleanUpReporter:
        return self._reporter

    @reporter.setter
    def reporter(self, reporter: CleanUpReporter) -> None:
        self._reporter = reporter

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_task(self, description: str, callback: TaskCallback) -> TaskHandle:
        """Register an undo action and return a fresh handle for it.

        No deduplication takes place: equal arguments still produce a
        new, independent task.
        """
        handle = TaskHandle()
        self._tasks[handle] = RegisteredTask(description, callback)
        return handle

    def _get_task(self, handle: TaskHandle) -> RegisteredTask:
        try:
            return self._tasks[handle]
        except (KeyError, TypeError):
            raise UnknownTaskError(f"Unregistered task: {handle!r}") from None

    # ------------------------------------------------------------------
    # Run-stack
    # ------------------------------------------------------------------

    def schedule(self, handle: TaskHandle) -> None:
        """Push the task for *handle* onto the run-stack.

        Scheduling an already scheduled task adds a second entry.
        """
        self._scheduled.append(self._get_task(handle))

    def unschedule(self, handle: TaskHandle) -> None:
        """Remove the most recent run-stack entry for *handle*, if any."""
        task = self._get_task(handle)
        for idx in range(len(self._scheduled) - 1, -1, -1):
            if self._scheduled[idx] is task:
                del self._scheduled[idx]
                return

    def has_pending_tasks(self) -> bool:
        """Return ``True`` if at least one task is scheduled."""
        return bool(self._scheduled)

    def pending_descriptions(self) -> list[str]:
        """Return the scheduled task descriptions, bottom of stack first."""
        return [task.description for task in self._scheduled]

    async def clean_up(self, list_only: bool = False) -> None:
        """Unwind the run-stack, most recently scheduled task first.

        Each entry is popped, reported and (unless *list_only*) run; an
        awaitable result is awaited before the next entry is popped.
        The first exception raised by a task propagates unchanged and
        leaves every entry below it on the stack.

        The live stack is used throughout, so tasks scheduled by a
        running callback are unwound too.
        """
        while self._scheduled:
            task = self._scheduled.pop()
            self._reporter.report_task(task.description)
            if not list_only:
                await _resolve(task.callback())

    # ------------------------------------------------------------------
    # Scoped execution
    # ------------------------------------------------------------------

    def with_task(
        self,
        handle: TaskHandle,
        fn: Callable[[], Awaitable[T] | T],
    ) -> Coroutine[Any, Any, T]:
        """Keep *handle* scheduled for as long as *fn* is in flight.

        *handle* is scheduled immediately (an unknown handle raises here,
        not when the returned coroutine is awaited).  When *fn* succeeds
        the handle is unscheduled and *fn*'s result returned.  When it
        fails the handle stays scheduled and the error propagates.
        """
        self.schedule(handle)
        return self._run_scheduled(handle, fn)

    async def _run_scheduled(
        self,
        handle: TaskHandle,
        fn: Callable[[], Awaitable[T] | T],
    ) -> T:
        value = await _resolve(fn())
        self.unschedule(handle)
        return value

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def get_clean_up_phase(self) -> Phase:
        """Return the phase that frames an interactive clean-up run."""
        return Phase(
            CLEAN_UP_PHASE_ID,
            CLEAN_UP_PHASE_DESCRIPTION,
            (),
            CLEAN_UP_PHASE_ERROR,
        )
