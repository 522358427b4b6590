"""Phase executor and the failure / clean-up-offer flow.

A phase runs as::

    Running ─┬─> Succeeded
             └─> Failed ─┬─> (no pending tasks)        ─┐
                         └─> clean-up offered ─┬─> cleaned up       ├─> OperationAbortedError
                                               ├─> declined         │
                                               └─> clean-up errored ┘

Every failure path prints the ``ERROR: …`` / ``OPERATION ABORTED!``
block and ends in :class:`~phasekit.exceptions.OperationAbortedError`.
The application's original exception is displayed, never re-raised.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Mapping
from typing import NoReturn, TypeVar

from phasekit.cli.console import ConsoleReporter, console, err_console, escape
from phasekit.cli.prompts import ask_yes_or_no_question
from phasekit.core.clean_up import TaskRegistry
from phasekit.core.config import UNEXPECTED_ERROR_KEY
from phasekit.core.models import Phase
from phasekit.core.protocols import NullReporter
from phasekit.exceptions import AnswerDeclinedError, OperationAbortedError

T = TypeVar("T")

NO_ERROR_CODE: str = "<no error code>"
CLEAN_UP_QUESTION: str = "Do you want me to try to clean up for you?"
NOT_CLEANING_UP_MESSAGE: str = (
    "OK, I'm not doing anything. FYI, the pending tasks (afaik) are:"
)


def describe_error(error: BaseException) -> str:
    """Render *error* as ``"Type: message"`` (or just ``"Type"``)."""
    message = str(error)
    name = type(error).__name__
    return f"{name}: {message}" if message else name


class Ui:
    """User-facing side of phase execution.

    Parameters
    ----------
    registry:
        The clean-up registry whose pending tasks are offered for
        unwinding when a phase fails.
        A registry that reports nothing is given a console reporter so
        the unwound or declined tasks are always listed.
    error_messages:
        Error-code to message table; codes missing from it are shown
        verbatim.
    """

    def __init__(
        self,
        registry: TaskRegistry,
        error_messages: Mapping[str, str] | None = None,
    ) -> None:
        if isinstance(registry.reporter, NullReporter):
            registry.reporter = ConsoleReporter()
        self._registry = registry
        self._error_messages: Mapping[str, str] = error_messages or {}

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def resolve_error_message(self, error_or_code: str | None) -> str:
        """Look up *error_or_code*, falling back to the code itself."""
        if error_or_code and self._error_messages.get(error_or_code):
            return self._error_messages[error_or_code]
        return error_or_code or NO_ERROR_CODE

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    async def run_phase(
        self,
        phase: Phase,
        do_work: Callable[[], Awaitable[T]],
        skip_clean_up: bool = False,
    ) -> T:
        """Run *do_work* framed by *phase*'s start / done banners.

        Raises
        ------
        TypeError
            If *do_work* does not return an awaitable.
        OperationAbortedError
            If the work failed; the failure has already been reported.
        """
        console.print(
            f"\n\n[bold cyan]  PHASE {escape(phase.id)} - {escape(phase.description)}...[/bold cyan]\n"
        )

        pending = do_work()
        if not inspect.isawaitable(pending):
            raise TypeError(
                f"do_work for phase {phase.id!r} must return an awaitable, "
                f"got {type(pending).__name__}"
            )

        try:
            output = await pending
        except Exception as exc:
            await self.report_and_abort(
                phase.error or UNEXPECTED_ERROR_KEY,
                skip_clean_up=skip_clean_up,
                extra_error=exc,
            )

        console.print("[green]\n  ...done[/green]")
        return output

    async def report_and_abort(
        self,
        error_or_code: str | None,
        skip_clean_up: bool = False,
        extra_error: BaseException | None = None,
    ) -> NoReturn:
        """Report a failure, offer clean-up if needed, then abort.

        Raises
        ------
        OperationAbortedError
            Always, once reporting (and any clean-up) is over.
        """
        message = self.resolve_error_message(error_or_code)

        if extra_error is not None:
            err_console.print(f"\n{escape(describe_error(extra_error))}")
        err_console.print(
            f"[red]\n  ERROR: {escape(message)}\n"
            "         [dim](Clean-up might or might not be needed.)[/dim]\n\n"
            "  [bold]OPERATION ABORTED![/bold][/red]"
        )

        if not skip_clean_up and self._registry.has_pending_tasks():
            try:
                await self.offer_to_clean_up()
            except Exception as clean_up_error:
                err_console.print(
                    "[red]\nSomething went wrong:[/red]",
                    escape(describe_error(clean_up_error)),
                )

        raise OperationAbortedError(message) from extra_error

    # ------------------------------------------------------------------
    # Clean-up
    # ------------------------------------------------------------------

    async def offer_to_clean_up(self) -> None:
        """Ask whether to unwind pending tasks; run or merely list them.

        Raises
        ------
        OperationAbortedError
            If the user agreed and the clean-up phase failed.
        """
        try:
            await ask_yes_or_no_question(CLEAN_UP_QUESTION)
        except AnswerDeclinedError:
            console.print(f"\n{NOT_CLEANING_UP_MESSAGE}")
            await self._registry.clean_up(list_only=True)
            return

        await self.run_phase(
            self._registry.get_clean_up_phase(),
            self._registry.clean_up,
            skip_clean_up=True,
        )
