"""Infrastructure: spawning external commands from coroutines.

Commands are given as a single string with a minimal grammar: tokens
are separated by spaces, double-quoted segments keep their spaces (the
quotes are dropped), and `` | `` chains commands with OS pipes.

Rules
-----
* No shell is involved in :func:`spawn_as_promised`.
* Unpiped standard streams are inherited from the current process.
* Failures surface as :class:`~phasekit.exceptions.ProcessFailedError`.
"""

from __future__ import annotations

import asyncio
import os
import re
from dataclasses import dataclass
from typing import IO, Any

from phasekit.exceptions import ProcessFailedError
from phasekit.infra.args import remove_surrounding_quotes

COMMAND_NOT_FOUND: int = 127
"""Return code reported when an executable cannot be started."""

_PIPE_SEPARATOR = re.compile(r"\s+\|\s+")


@dataclass(frozen=True, slots=True)
class CommandSpec:
    """A single executable invocation."""

    executable: str
    args: tuple[str, ...]

    def __str__(self) -> str:
        return " ".join((self.executable, *self.args))


def parse_single_command(cmd: str) -> CommandSpec:
    """Tokenise *cmd* on spaces, keeping double-quoted segments whole.

    A quoted segment glued to surrounding text (``--msg="a b"``) stays
    part of the same token; only fully quoted tokens lose their quotes.
    """
    tokens: list[str] = []
    for idx, chunk in enumerate(cmd.split('"')):
        new_tokens = [f'"{chunk}"'] if idx % 2 else chunk.split(" ")
        if tokens:
            tokens[-1] += new_tokens.pop(0)
        tokens.extend(new_tokens)

    cleaned = [remove_surrounding_quotes(token) for token in tokens if token]
    if not cleaned:
        raise ValueError(f"Empty command: {cmd!r}")
    return CommandSpec(executable=cleaned[0], args=tuple(cleaned[1:]))


def parse_command(raw_cmd: str) -> list[CommandSpec]:
    """Split *raw_cmd* on `` | `` and parse every piped command."""
    return [parse_single_command(cmd) for cmd in _PIPE_SEPARATOR.split(raw_cmd.strip())]


async def spawn_as_promised(
    raw_cmd: str,
    input_stream: IO[Any] | int | None = None,
    output_stream: IO[Any] | int | None = None,
) -> None:
    """Run *raw_cmd* (possibly a pipeline) and wait for every process.

    Parameters
    ----------
    raw_cmd:
        Command string, e.g. ``'git log --oneline | head -n 5'``.
    input_stream:
        Feeds the first command's stdin; inherited when ``None``.
    output_stream:
        Receives the last command's stdout; inherited when ``None``.

    Raises
    ------
    ProcessFailedError
        For the first command (in pipeline order) that exits non-zero or
        cannot be started.
    """
    specs = parse_command(raw_cmd)
    procs: list[tuple[CommandSpec, asyncio.subprocess.Process]] = []
    stdin: IO[Any] | int | None = input_stream
    owned_fd: int | None = None

    try:
        for idx, spec in enumerate(specs):
            is_last = idx == len(specs) - 1
            read_fd: int | None = None
            if is_last:
                stdout: IO[Any] | int | None = output_stream
            else:
                read_fd, stdout = os.pipe()

            try:
                proc = await asyncio.create_subprocess_exec(
                    spec.executable,
                    *spec.args,
                    stdin=stdin,
                    stdout=stdout,
                )
            except OSError as exc:
                if read_fd is not None:
                    os.close(read_fd)
                    os.close(stdout)  # type: ignore[arg-type]
                raise ProcessFailedError(
                    str(spec), COMMAND_NOT_FOUND, stderr=str(exc),
                ) from exc
            finally:
                if owned_fd is not None:
                    os.close(owned_fd)
                    owned_fd = None

            procs.append((spec, proc))
            if read_fd is not None:
                os.close(stdout)  # type: ignore[arg-type]
                stdin = owned_fd = read_fd
    finally:
        if owned_fd is not None:
            os.close(owned_fd)

    returncodes = [await proc.wait() for _, proc in procs]
    for (spec, _), returncode in zip(procs, returncodes):
        if returncode != 0:
            raise ProcessFailedError(str(spec), returncode)


async def exec_as_promised(cmd: str) -> str:
    """Run *cmd* through the shell and return its captured stdout.

    Raises
    ------
    ProcessFailedError
        If the command exits non-zero; ``stderr`` carries its output.
    """
    proc = await asyncio.create_subprocess_shell(
        cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        raise ProcessFailedError(
            cmd,
            proc.returncode if proc.returncode is not None else -1,
            stderr=stderr.decode(errors="replace"),
        )
    return stdout.decode(errors="replace")
