"""Tests for the phase executor and clean-up offer (cli/ui.py).

Covers the per-phase state machine: success, failure with nothing to
clean up, failure with clean-up accepted / declined / erroring.
``questionary`` is mocked through the ``answers`` fixture.
"""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import MagicMock

import pytest

from phasekit.cli.console import ConsoleReporter
from phasekit.cli.ui import NOT_CLEANING_UP_MESSAGE, Ui, describe_error
from phasekit.core.clean_up import TaskRegistry
from phasekit.core.models import Phase
from phasekit.exceptions import OperationAbortedError

ERRORS = {
    "ERROR_unexpected": "Something went wrong (and that's all I know)!",
    "ERROR_build": "Build failed.",
}


@pytest.fixture
def registry() -> TaskRegistry:
    return TaskRegistry(ConsoleReporter())


@pytest.fixture
def ui(registry: TaskRegistry) -> Ui:
    return Ui(registry, ERRORS)


@pytest.fixture
def phase() -> Phase:
    return Phase("2", "Build the release", (), "ERROR_build")


async def _boom() -> None:
    raise RuntimeError("boom")


# ---------------------------------------------------------------------------
# Message lookup
# ---------------------------------------------------------------------------

class TestResolveErrorMessage:
    def test_known_code(self, ui: Ui) -> None:
        assert ui.resolve_error_message("ERROR_build") == "Build failed."

    def test_unknown_code_is_shown_verbatim(self, ui: Ui) -> None:
        assert ui.resolve_error_message("Disk on fire") == "Disk on fire"

    @pytest.mark.parametrize("code", [None, ""])
    def test_missing_code(self, ui: Ui, code: str | None) -> None:
        assert ui.resolve_error_message(code) == "<no error code>"

    def test_without_table(self, registry: TaskRegistry) -> None:
        assert Ui(registry).resolve_error_message("ERROR_build") == "ERROR_build"


class TestDescribeError:
    def test_with_message(self) -> None:
        assert describe_error(ValueError("bad")) == "ValueError: bad"

    def test_without_message(self) -> None:
        assert describe_error(ValueError()) == "ValueError"


# ---------------------------------------------------------------------------
# run_phase: success
# ---------------------------------------------------------------------------

class TestRunPhaseSuccess:
    def test_returns_value_and_prints_banners(
        self, ui: Ui, phase: Phase, capsys: pytest.CaptureFixture[str],
    ) -> None:
        async def work() -> str:
            return "v1.2.3"

        assert asyncio.run(ui.run_phase(phase, work)) == "v1.2.3"

        out, err = capsys.readouterr()
        assert "PHASE 2 - Build the release..." in out
        assert "...done" in out
        assert out.index("PHASE 2") < out.index("...done")
        assert err == ""

    def test_non_awaitable_work_is_a_contract_violation(
        self, ui: Ui, phase: Phase,
    ) -> None:
        with pytest.raises(TypeError, match="must return an awaitable"):
            asyncio.run(ui.run_phase(phase, lambda: "nope"))  # type: ignore[arg-type,return-value]


# ---------------------------------------------------------------------------
# run_phase: failure
# ---------------------------------------------------------------------------

class TestRunPhaseFailure:
    def test_no_pending_tasks(
        self, ui: Ui, phase: Phase, capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(OperationAbortedError) as exc_info:
            asyncio.run(ui.run_phase(phase, _boom))

        out, err = capsys.readouterr()
        assert "PHASE 2 - Build the release..." in out
        assert "...done" not in out
        assert "RuntimeError: boom" in err
        assert "ERROR: Build failed." in err
        assert "(Clean-up might or might not be needed.)" in err
        assert "OPERATION ABORTED!" in err
        assert str(exc_info.value) == "Build failed."
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_phase_without_error_uses_generic_message(
        self, ui: Ui, capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(OperationAbortedError):
            asyncio.run(ui.run_phase(Phase("1", "Prepare"), _boom))
        assert "ERROR: Something went wrong (and that's all I know)!" in capsys.readouterr().err

    def test_markup_in_messages_is_printed_literally(
        self, registry: TaskRegistry, capsys: pytest.CaptureFixture[str],
    ) -> None:
        ui = Ui(registry, {"ERROR_x": "Branch [main] is dirty."})
        with pytest.raises(OperationAbortedError):
            asyncio.run(ui.run_phase(Phase("1", "Check [repo]", (), "ERROR_x"), _boom))

        out, err = capsys.readouterr()
        assert "PHASE 1 - Check [repo]..." in out
        assert "ERROR: Branch [main] is dirty." in err

    def test_accepting_clean_up_unwinds_tasks(
        self,
        ui: Ui,
        registry: TaskRegistry,
        phase: Phase,
        answers: list[str],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        log: list[str] = []
        first = registry.register_task("Delete tag", lambda: log.append("tag"))
        second = registry.register_task("Reset branch", lambda: log.append("branch"))
        registry.schedule(first)
        registry.schedule(second)
        answers.append("y")

        with pytest.raises(OperationAbortedError):
            asyncio.run(ui.run_phase(phase, _boom))

        out, _ = capsys.readouterr()
        assert log == ["branch", "tag"]
        assert registry.has_pending_tasks() is False
        assert "PHASE X - Trying to clean up the mess..." in out
        assert out.index("Clean-up task: Reset branch") < out.index("Clean-up task: Delete tag")
        assert out.rstrip().endswith("...done")
        assert NOT_CLEANING_UP_MESSAGE not in out

    @pytest.mark.parametrize("answer", ["n", "", "whatever"])
    def test_declining_clean_up_lists_tasks(
        self,
        ui: Ui,
        registry: TaskRegistry,
        phase: Phase,
        answers: list[str],
        capsys: pytest.CaptureFixture[str],
        answer: str,
    ) -> None:
        callback = MagicMock()
        registry.schedule(registry.register_task("Delete tag", callback))
        answers.append(answer)

        with pytest.raises(OperationAbortedError):
            asyncio.run(ui.run_phase(phase, _boom))

        out, _ = capsys.readouterr()
        callback.assert_not_called()
        assert registry.has_pending_tasks() is False
        assert NOT_CLEANING_UP_MESSAGE in out
        assert "Clean-up task: Delete tag" in out
        assert "PHASE X" not in out

    def test_clean_up_error_is_reported_separately(
        self,
        ui: Ui,
        registry: TaskRegistry,
        phase: Phase,
        answers: list[str],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        async def fail() -> None:
            raise OSError("remote gone")

        registry.schedule(registry.register_task("Keep me", lambda: None))
        registry.schedule(registry.register_task("Push revert", fail))
        answers.append("yes")

        with pytest.raises(OperationAbortedError) as exc_info:
            asyncio.run(ui.run_phase(phase, _boom))

        _, err = capsys.readouterr()
        assert str(exc_info.value) == "Build failed."
        assert "OSError: remote gone" in err
        assert "ERROR: Failed to clean up everything." in err
        assert "Something went wrong:" in err
        assert registry.pending_descriptions() == ["Keep me"]

    def test_skip_clean_up_does_not_prompt(
        self,
        ui: Ui,
        registry: TaskRegistry,
        phase: Phase,
        answers: list[str],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        registry.schedule(registry.register_task("Delete tag", lambda: None))

        with pytest.raises(OperationAbortedError):
            asyncio.run(ui.run_phase(phase, _boom, skip_clean_up=True))

        out, err = capsys.readouterr()
        assert registry.has_pending_tasks() is True
        assert "Something went wrong" not in err
        assert NOT_CLEANING_UP_MESSAGE not in out


# ---------------------------------------------------------------------------
# report_and_abort / offer_to_clean_up directly
# ---------------------------------------------------------------------------

class TestReportAndAbort:
    def test_always_raises(self, ui: Ui, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(OperationAbortedError):
            asyncio.run(ui.report_and_abort("ERROR_build"))
        _, err = capsys.readouterr()
        assert "ERROR: Build failed." in err

    def test_no_extra_error_printed_when_absent(
        self, ui: Ui, capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(OperationAbortedError) as exc_info:
            asyncio.run(ui.report_and_abort(None))
        _, err = capsys.readouterr()
        assert "ERROR: <no error code>" in err
        assert exc_info.value.__cause__ is None


class TestOfferToCleanUp:
    def test_accepted_phase_failure_propagates(
        self, ui: Ui, registry: TaskRegistry, answers: list[str],
    ) -> None:
        def fail() -> Any:
            raise RuntimeError("nope")

        registry.schedule(registry.register_task("Undo", fail))
        answers.append("Y")

        with pytest.raises(OperationAbortedError, match="Failed to clean up everything."):
            asyncio.run(ui.offer_to_clean_up())

    def test_declined_returns_normally(
        self, ui: Ui, registry: TaskRegistry, answers: list[str],
    ) -> None:
        registry.schedule(registry.register_task("Undo", lambda: None))
        answers.append("no")

        assert asyncio.run(ui.offer_to_clean_up()) is None
        assert registry.has_pending_tasks() is False


class TestRegistryWithoutReporter:
    @pytest.mark.parametrize("answer", ["n", "y"])
    def test_tasks_are_listed_either_way(
        self,
        phase: Phase,
        answers: list[str],
        capsys: pytest.CaptureFixture[str],
        answer: str,
    ) -> None:
        registry = TaskRegistry()
        ui = Ui(registry, ERRORS)
        registry.schedule(registry.register_task("Delete branch foo", lambda: None))
        answers.append(answer)

        with pytest.raises(OperationAbortedError):
            asyncio.run(ui.run_phase(phase, _boom))

        out, _ = capsys.readouterr()
        assert "Clean-up task: Delete branch foo" in out
        assert registry.has_pending_tasks() is False

    def test_own_reporter_is_kept(self) -> None:
        reporter = MagicMock()
        registry = TaskRegistry(reporter)
        Ui(registry)
        assert registry.reporter is reporter
