"""Custom exception hierarchy for phasekit.

Every error raised by the toolkit itself inherits from
:class:`PhasekitError`.  Exceptions raised by application code (phase
work, clean-up callbacks) are never wrapped: they propagate unchanged
until the phase executor reports them.

Hierarchy
---------
PhasekitError
├── UnknownTaskError
├── InvalidFieldError
├── ArgumentValidationError
├── AnswerDeclinedError
├── OperationAbortedError
├── ProcessFailedError
└── EnvironmentError
"""

from __future__ import annotations


class PhasekitError(Exception):
    """Base exception for all phasekit errors."""

    def __init__(self, message: str = "", *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Task registry ---------------------------------------------------------

class UnknownTaskError(PhasekitError):
    """Raised when a task handle was not issued by the registry in use.

    This is always a programming error and is raised synchronously.
    """


# --- Declarative values ----------------------------------------------------

class InvalidFieldError(PhasekitError, ValueError):
    """Raised when a phase, argument spec or config has a bad field."""

    def __init__(self, field: str, owner: object) -> None:
        super().__init__(f"Missing or invalid field `{field}` on: {owner!r}")
        self.field: str = field


class ArgumentValidationError(PhasekitError):
    """Raised when a command-line argument fails its validator.

    ``error_code`` is the key looked up in the application's error
    message table.
    """

    def __init__(self, error_code: str, *, hint: str | None = None) -> None:
        super().__init__(error_code, hint=hint)
        self.error_code: str = error_code


# --- Interaction -----------------------------------------------------------

class AnswerDeclinedError(PhasekitError):
    """Raised when the user answers a yes/no question negatively."""


class OperationAbortedError(PhasekitError):
    """Raised after a failure has been reported to the user.

    By the time this escapes, the error block has been printed and any
    clean-up offer has run.  Callers should only translate it into a
    non-zero exit status.
    """


# --- Processes -------------------------------------------------------------

class ProcessFailedError(PhasekitError):
    """Raised when a spawned command exits with a non-zero status."""

    def __init__(
        self,
        command: str,
        returncode: int,
        *,
        stderr: str = "",
    ) -> None:
        super().__init__(_describe_exit(command, returncode))
        self.command: str = command
        self.returncode: int = returncode
        self.stderr: str = stderr


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(PhasekitError):
    """Raised when a required runtime dependency is not available."""


def _describe_exit(command: str, returncode: int) -> str:
    """Render ``"<cmd> failed (exit N)"`` or ``"... (signal NAME)"``."""
    if returncode < 0:
        import signal

        try:
            name = signal.Signals(-returncode).name
        except ValueError:
            name = str(-returncode)
        return f"{command} failed (signal {name})"
    return f"{command} failed (exit {returncode})"
