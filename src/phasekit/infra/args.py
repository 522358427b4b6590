"""Infrastructure: raw command-line tokenising.

The three reserved flags (``--version``, ``--usage``, ``--instructions``)
are recognised with :mod:`argparse`; everything else is tokenised
loosely so applications can declare their own options through
:class:`~phasekit.core.arg_spec.ArgSpec` without a grammar.

Rules
-----
* ``--name`` is a boolean ``True``; ``--name=value`` is a string.
* ``-abc`` sets ``a``, ``b`` and ``c`` to ``True``.
* ``--`` ends option parsing.
* One pair of matching surrounding quotes is removed from every value.
"""

from __future__ import annotations

import argparse
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import NoReturn

from phasekit.core.config import INVALID_ARGUMENTS_KEY
from phasekit.core.models import ParsedArgs
from phasekit.exceptions import ArgumentValidationError

_QUOTED = (re.compile(r'^"([^"]*)"$'), re.compile(r"^'([^']*)'$"))


@dataclass(frozen=True, slots=True)
class ReservedFlags:
    """Top-level flags handled by the toolkit itself."""

    version: bool = False
    usage: bool = False
    instructions: bool = False


def remove_surrounding_quotes(value: str) -> str:
    """Strip one pair of matching ``"`` or ``'`` quotes around *value*."""
    for pattern in _QUOTED:
        match = pattern.match(value)
        if match:
            return match.group(1)
    return value


class _ReservedFlagParser(argparse.ArgumentParser):
    """Parser whose errors are reported like any other bad argument."""

    def error(self, message: str) -> NoReturn:
        raise ArgumentValidationError(INVALID_ARGUMENTS_KEY, hint=message)


def _build_parser() -> argparse.ArgumentParser:
    parser = _ReservedFlagParser(add_help=False, allow_abbrev=False)
    parser.add_argument("--version", action="store_true")
    parser.add_argument("--usage", action="store_true")
    parser.add_argument("--instructions", action="store_true")
    return parser


def parse_args(raw_args: Sequence[str]) -> tuple[ReservedFlags, ParsedArgs]:
    """Split *raw_args* into reserved flags and application arguments.

    Raises
    ------
    ArgumentValidationError
        If a reserved flag is misused (e.g. ``--version=1``).
    """
    reserved, rest = _build_parser().parse_known_args(list(raw_args))
    flags = ReservedFlags(
        version=reserved.version,
        usage=reserved.usage,
        instructions=reserved.instructions,
    )
    return flags, tokenize(rest)


def tokenize(tokens: Sequence[str]) -> ParsedArgs:
    """Tokenise application arguments into positionals and options."""
    positionals: list[str] = []
    options: dict[str, str | bool] = {}
    options_ended = False

    for token in tokens:
        if options_ended:
            positionals.append(remove_surrounding_quotes(token))
        elif token == "--":
            options_ended = True
        elif token.startswith("--"):
            name, sep, value = token[2:].partition("=")
            options[name] = remove_surrounding_quotes(value) if sep else True
        elif token.startswith("-") and len(token) > 1:
            for letter in token[1:]:
                options[letter] = True
        else:
            positionals.append(remove_surrounding_quotes(token))

    return ParsedArgs(positionals=tuple(positionals), options=options)
