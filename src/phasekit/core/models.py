"""Domain models for phasekit.

Value objects are frozen dataclasses.  :class:`Phase` validates its
fields eagerly so that a bad static phase definition fails at import
time of the application, not halfway through a release.

Task handles and registered tasks compare by identity: registering the
same description and callback twice yields two independent tasks.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from phasekit.exceptions import InvalidFieldError

TaskCallback = Callable[[], "Awaitable[Any] | Any"]
"""A clean-up callback; may be a plain function or return an awaitable."""


# ---------------------------------------------------------------------------
# Clean-up tasks
# ---------------------------------------------------------------------------

class TaskHandle:
    """Opaque token identifying a registered clean-up task.

    Only :meth:`TaskRegistry.register_task` hands these out.  A handle
    built by any other means is unknown to every registry.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return f"<TaskHandle at {id(self):#x}>"


@dataclass(frozen=True, slots=True, eq=False)
class RegisteredTask:
    """An undo action known to the registry."""

    description: str
    """Human-readable summary, shown when the task is run or listed."""

    callback: TaskCallback
    """Performs the undo; awaited when it returns an awaitable."""


# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Phase:
    """A named unit of work of a multi-phase operation.

    ``instructions`` are template strings (see
    :func:`phasekit.core.text.interpolate`) describing how to perform the
    phase by hand.  ``error`` is the error-message key reported when the
    phase's work fails.
    """

    id: str
    description: str
    instructions: tuple[str, ...] = ()
    error: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str):
            raise InvalidFieldError("id", self)
        if not isinstance(self.description, str):
            raise InvalidFieldError("description", self)

        instructions: Any = self.instructions
        if instructions is None:
            instructions = ()
        if not isinstance(instructions, (list, tuple)):
            raise InvalidFieldError("instructions", self)
        for instruction in instructions:
            if not isinstance(instruction, str):
                raise InvalidFieldError("instruction", self)
        object.__setattr__(self, "instructions", tuple(instructions))

        if not self.error:
            object.__setattr__(self, "error", None)
        elif not isinstance(self.error, str):
            raise InvalidFieldError("error", self)


# ---------------------------------------------------------------------------
# Command-line arguments
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ParsedArgs:
    """Tokenised command-line arguments."""

    positionals: tuple[str, ...] = ()
    """Arguments that are not options, in order."""

    options: dict[str, str | bool] = field(default_factory=dict)
    """``--flag`` maps to ``True``; ``--key=value`` maps to ``"value"``."""
