"""phasekit: toolkit for interactive, multi-phase command-line tools.

Phased progress reporting, declarative argument validation and a
best-effort, confirmation-gated rollback of pending clean-up tasks.
"""

from phasekit.cli.app import AbstractCli
from phasekit.cli.ui import Ui
from phasekit.core.arg_spec import ArgSpec, UnnamedArgSpec
from phasekit.core.clean_up import TaskRegistry
from phasekit.core.config import Config
from phasekit.core.models import Phase
from phasekit.version import __version__

__all__: list[str] = [
    "AbstractCli",
    "ArgSpec",
    "Config",
    "Phase",
    "TaskRegistry",
    "Ui",
    "UnnamedArgSpec",
    "__version__",
]
