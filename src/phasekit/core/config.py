"""Application configuration: message tables, argument specs, version.

:class:`Config` normalises whatever the embedding application supplies
so the rest of the toolkit can rely on every message key being present.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from importlib import metadata
from typing import Any

from phasekit.core.arg_spec import ArgSpec
from phasekit.exceptions import InvalidFieldError

UNEXPECTED_ERROR_KEY: str = "ERROR_unexpected"
UNEXPECTED_ERROR_MESSAGE: str = "Something went wrong (and that's all I know)!"

INVALID_ARGUMENTS_KEY: str = "ERROR_invalid_arguments"
INVALID_ARGUMENTS_MESSAGE: str = "Invalid command-line arguments."

EXPERIMENTAL_TOOL_WARNING_KEY: str = "WARN_experimental_tool"
EXPERIMENTAL_TOOL_WARNING_MESSAGE: str = "\n".join(
    (
        ":::::::::::::::::::::::::::::::::::::::::::::",
        "::  WARNING:                               ::",
        "::    This is still an experimental tool.  ::",
        "::    Use at your own risk!                ::",
        ":::::::::::::::::::::::::::::::::::::::::::::",
    )
)

_TEMPLATE_MESSAGES: tuple[str, ...] = ("usage", "instructions_header_tmpl", "header_tmpl")
_NOT_AVAILABLE = "N/A"


@dataclass(frozen=True, slots=True)
class VersionInfo:
    """Name and version of the distribution embedding the toolkit."""

    name: str
    version: str


def load_version_info(package: str | None) -> VersionInfo:
    """Read name and version of the installed distribution *package*.

    Falls back to ``"N/A"`` for anything that cannot be determined.
    """
    if not package:
        return VersionInfo(_NOT_AVAILABLE, _NOT_AVAILABLE)
    try:
        dist_metadata = metadata.metadata(package)
    except metadata.PackageNotFoundError:
        return VersionInfo(package, _NOT_AVAILABLE)
    return VersionInfo(
        dist_metadata.get("Name") or package,
        dist_metadata.get("Version") or _NOT_AVAILABLE,
    )


class Config:
    """Normalised configuration for an :class:`~phasekit.cli.app.AbstractCli`.

    Parameters
    ----------
    messages:
        ``errors`` and ``warnings`` tables plus the ``usage``,
        ``instructions_header_tmpl`` and ``header_tmpl`` texts.  Copied,
        never mutated.
    arg_specs:
        Argument specifications validated on every run.
    package:
        Distribution name used to look up the displayed name/version.
    """

    def __init__(
        self,
        messages: Mapping[str, Any] | None = None,
        arg_specs: Sequence[ArgSpec] | None = None,
        package: str | None = None,
    ) -> None:
        self.messages: dict[str, Any] = self._initialize_messages(messages)
        self.arg_specs: list[ArgSpec] = list(arg_specs or [])

        self._validate_fields()

        self.defaults: dict[str, str | None] = {
            spec.key: spec.default_value for spec in self.arg_specs
        }
        self.version_info: VersionInfo = load_version_info(package)

    def __repr__(self) -> str:
        return f"Config(arg_specs={self.arg_specs!r})"

    @property
    def error_messages(self) -> dict[str, str]:
        return self.messages["errors"]

    @property
    def warning_messages(self) -> dict[str, str]:
        return self.messages["warnings"]

    @staticmethod
    def _initialize_messages(messages: Mapping[str, Any] | None) -> dict[str, Any]:
        normalized: dict[str, Any] = copy.deepcopy(dict(messages or {}))
        normalized.setdefault("errors", {})
        normalized.setdefault("warnings", {})

        for name in _TEMPLATE_MESSAGES:
            if not isinstance(normalized.get(name), str):
                normalized[name] = f"<no {name} message>"

        errors = normalized["errors"]
        if isinstance(errors, dict) and not isinstance(errors.get(UNEXPECTED_ERROR_KEY), str):
            errors[UNEXPECTED_ERROR_KEY] = UNEXPECTED_ERROR_MESSAGE
        if isinstance(errors, dict) and not isinstance(errors.get(INVALID_ARGUMENTS_KEY), str):
            errors[INVALID_ARGUMENTS_KEY] = INVALID_ARGUMENTS_MESSAGE

        warnings = normalized["warnings"]
        if isinstance(warnings, dict) and not isinstance(
            warnings.get(EXPERIMENTAL_TOOL_WARNING_KEY), str
        ):
            warnings[EXPERIMENTAL_TOOL_WARNING_KEY] = EXPERIMENTAL_TOOL_WARNING_MESSAGE

        return normalized

    def _validate_fields(self) -> None:
        if not isinstance(self.messages.get("errors"), dict):
            raise InvalidFieldError("messages.errors", self)
        if not isinstance(self.messages.get("warnings"), dict):
            raise InvalidFieldError("messages.warnings", self)
        for spec in self.arg_specs:
            if not isinstance(spec, ArgSpec):
                raise InvalidFieldError("arg_spec", self)
