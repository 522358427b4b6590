"""Base class for multi-phase command-line tools.

:class:`AbstractCli` is the **error boundary** of an application built
on phasekit.  It handles the reserved ``--version`` / ``--usage`` /
``--instructions`` flags (in that order of precedence), validates the
remaining arguments against the configured
:class:`~phasekit.core.arg_spec.ArgSpec` list, runs the application's
work and funnels every failure through the same reporting and clean-up
path as a failed phase.

Subclasses provide :meth:`AbstractCli.get_phases` and
:meth:`AbstractCli.do_work`; inside ``do_work`` they run their phases
with ``self.ui.run_phase(...)`` and register undo actions with
``self.registry``.
"""

from __future__ import annotations

import asyncio
import re
import sys
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from phasekit.cli import exit_codes
from phasekit.cli.console import ConsoleReporter, console, err_console, escape
from phasekit.cli.ui import Ui
from phasekit.core.clean_up import TaskRegistry
from phasekit.core.config import EXPERIMENTAL_TOOL_WARNING_KEY, UNEXPECTED_ERROR_KEY, Config
from phasekit.core.models import Phase
from phasekit.core.text import interpolate
from phasekit.exceptions import ArgumentValidationError, OperationAbortedError
from phasekit.infra.args import parse_args

_CODE_SPAN = re.compile(r"`([^`]+)`")


def _highlight_code_spans(text: str) -> str:
    """Render back-ticked spans of *text* as green-on-black markup."""
    return _CODE_SPAN.sub(r"[green on black]\1[/green on black]", text)


class AbstractCli(ABC):
    """Skeleton of a phased, interactive command-line tool.

    Parameters
    ----------
    config:
        Messages, argument specs and version information.
    """

    def __init__(self, config: Config) -> None:
        self._config = config
        self.registry = TaskRegistry(ConsoleReporter())
        self.ui = Ui(self.registry, config.error_messages)

    # ------------------------------------------------------------------
    # To be provided by applications
    # ------------------------------------------------------------------

    @abstractmethod
    def get_phases(self) -> Sequence[Phase]:
        """Return the application's phases, in execution order."""

    @abstractmethod
    async def do_work(self, input: dict[str, Any]) -> Any:
        """Perform the actual operation for the validated *input*."""

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def _get_and_validate_input(self, raw_args: Sequence[str]) -> dict[str, Any]:
        flags, args = parse_args(raw_args)
        input: dict[str, Any] = {
            "version": flags.version,
            "usage": flags.usage,
            "instructions": flags.instructions,
        }

        if not flags.version and not flags.usage:
            for spec in self._config.arg_specs:
                spec.apply_on(args, input)

        return input

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def _display_version_info(self) -> None:
        info = self._config.version_info
        console.print(
            f"\n [bold yellow on magenta] {escape(info.name)} [/bold yellow on magenta]"
            f"[magenta on yellow] v{escape(info.version)} [/magenta on yellow] "
        )

    def _display_experimental_tool(self) -> None:
        warning = self._config.warning_messages.get(EXPERIMENTAL_TOOL_WARNING_KEY)
        if warning:
            console.print(f"\n[yellow]{escape(warning)}[/yellow]")

    def _display_header(self, header_tmpl: str, input: dict[str, Any]) -> None:
        header = interpolate(header_tmpl, input)

        self._display_version_info()
        self._display_experimental_tool()
        console.print(f"\n[bold blue]{escape(header)}[/bold blue]")

    def _display_usage(self, usage_message: str) -> None:
        first, _, rest = usage_message.partition("\n")

        self._display_version_info()
        self._display_experimental_tool()
        console.print(f"\n[bold]{escape(first)}[/bold]\n[dim]{escape(rest)}[/dim]")

    def _display_instructions(self, phases: Sequence[Phase], input: dict[str, Any]) -> None:
        for phase in phases:
            if not phase.instructions:
                continue

            console.print(
                f"\n\n[bold cyan]  PHASE {escape(phase.id)} - {escape(phase.description)}[/bold cyan]\n"
            )
            for instruction in phase.instructions:
                text = _highlight_code_spans(escape(interpolate(instruction, input)))
                console.print(f"    - {text}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _the_happy_end(self, value: Any) -> Any:
        console.print("[bold green]\n  OPERATION COMPLETED SUCCESSFULLY![/bold green]")
        return value

    async def run(self, raw_args: Sequence[str]) -> Any:
        """Run the tool for *raw_args* and return the work's result.

        Returns ``None`` when only version, usage or instructions were
        displayed.

        Raises
        ------
        OperationAbortedError
            On any failure, after it has been reported (and clean-up
            offered where tasks were pending).
        """
        messages = self._config.messages
        try:
            try:
                input = self._get_and_validate_input(raw_args)
            except ArgumentValidationError as exc:
                if exc.hint:
                    err_console.print(f"\n{escape(exc.hint)}")
                await self.ui.report_and_abort(exc.error_code)

            if input["version"]:
                self._display_version_info()
            elif input["usage"]:
                self._display_usage(messages["usage"])
            elif input["instructions"]:
                self._display_header(messages["instructions_header_tmpl"], input)
                self._display_instructions(self.get_phases(), input)
            else:
                self._display_header(messages["header_tmpl"], input)
                value = await self.do_work(input)
                return self._the_happy_end(value)
        except OperationAbortedError:
            raise
        except Exception as exc:
            await self.ui.report_and_abort(UNEXPECTED_ERROR_KEY, extra_error=exc)
        finally:
            console.print()
        return None

    def main(self, argv: Sequence[str] | None = None) -> int:
        """Run the tool and return the OS process exit code.

        Parameters
        ----------
        argv:
            Explicit argument list.  When ``None`` (default),
            ``sys.argv[1:]`` is used.
        """
        raw_args = sys.argv[1:] if argv is None else argv
        try:
            asyncio.run(self.run(raw_args))
        except OperationAbortedError:
            return exit_codes.GENERAL_ERROR
        return exit_codes.SUCCESS

    def cli(self) -> None:
        """Top-level error boundary for a console-script entry point.

        Guarantees the process never exits with a raw stack trace during
        normal usage.
        """
        try:
            code = self.main()
            sys.exit(code)
        except KeyboardInterrupt:
            err_console.print("\n[yellow]Aborted by user.[/yellow]")
            sys.exit(exit_codes.KEYBOARD_INTERRUPT)
        except Exception as exc:  # noqa: BLE001
            err_console.print(
                "[bold red]Unexpected error.[/bold red] "
                "Please report this issue.\n"
                f"  {escape(type(exc).__name__)}: {escape(str(exc))}"
            )
            sys.exit(exit_codes.UNEXPECTED_ERROR)
