"""Core layer: clean-up registry, phases, argument specs, config.

Rules
-----
* No ``print()`` calls; user-facing text goes through protocols.
* No filesystem, network or process I/O.
* No imports from ``cli`` or ``infra``.
"""

from phasekit.core.arg_spec import ArgSpec, UnnamedArgSpec
from phasekit.core.clean_up import TaskRegistry
from phasekit.core.config import Config, VersionInfo
from phasekit.core.models import ParsedArgs, Phase, RegisteredTask, TaskHandle
from phasekit.core.protocols import CleanUpReporter, NullReporter
from phasekit.core.text import interpolate

__all__: list[str] = [
    "ArgSpec",
    "CleanUpReporter",
    "Config",
    "NullReporter",
    "ParsedArgs",
    "Phase",
    "RegisteredTask",
    "TaskHandle",
    "TaskRegistry",
    "UnnamedArgSpec",
    "VersionInfo",
    "interpolate",
]
