"""Infrastructure layer: command-line tokenising and process spawning.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Process failures are raised as
  :class:`~phasekit.exceptions.ProcessFailedError`.
"""

from phasekit.infra.args import ReservedFlags, parse_args, tokenize
from phasekit.infra.process import exec_as_promised, spawn_as_promised

__all__: list[str] = [
    "ReservedFlags",
    "exec_as_promised",
    "parse_args",
    "spawn_as_promised",
    "tokenize",
]
