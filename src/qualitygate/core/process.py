# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe, asynchronous wrapper around external command execution."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from ..context import RunContext, ensure_context
from ..errors import ToolExecutionError

END_OF_OPTIONS: Final[str] = "--"
DEFAULT_TIMEOUT: Final[float] = 30.0
DEFAULT_KILL_GRACE: Final[float] = 5.0
_DECODE_ERRORS: Final[str] = "replace"


@dataclass(frozen=True, slots=True)
class CommandOptions:
    """Immutable command execution options.

    Attributes:
        cwd: Working directory for the command; ``None`` inherits the process cwd.
        timeout: Seconds before the graceful termination sequence starts.
            ``None`` disables the timer.
        capture_output: When ``False`` stdout is discarded; stderr is always captured.
        env: Extra environment entries merged over the inherited environment.
    """

    cwd: Path | None = None
    timeout: float | None = DEFAULT_TIMEOUT
    capture_output: bool = True
    env: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.timeout is not None and self.timeout < 0:
            raise ValueError("timeout must be non-negative")


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of a single command invocation.

    ``success`` is true only when the process exited with status ``0`` and
    the timeout did not fire. ``exit_code`` is ``None`` when the process could
    not be spawned, in which case ``spawn_error`` explains why.
    """

    command: tuple[str, ...]
    success: bool
    stdout: str
    stderr: str
    exit_code: int | None
    timed_out: bool = False
    spawn_error: str | None = None

    def ensure_completed(self) -> CommandResult:
        """Return ``self`` when the command ran to completion.

        A non-zero exit status is still a completed run; only spawn failures
        and timeouts are treated as tool failures.

        Returns:
            CommandResult: The same result instance.

        Raises:
            ToolExecutionError: If the command could not be spawned or timed out.
        """

        if self.spawn_error is not None:
            raise ToolExecutionError(self.command, self.spawn_error)
        if self.timed_out:
            raise ToolExecutionError(self.command, "command timed out", timed_out=True)
        return self


def build_argv(args: Sequence[str], paths: Sequence[str | os.PathLike[str]]) -> list[str]:
    """Return ``args`` followed by the end-of-options marker and ``paths``.

    Args:
        args: Leading command arguments (subcommand and flags).
        paths: Caller-supplied file paths.

    Returns:
        list[str]: Argument vector where no path can be parsed as an option.
    """

    return [*args, END_OF_OPTIONS, *(os.fspath(path) for path in paths)]


class CommandRunner:
    """Spawn external commands without a shell and enforce timeouts.

    On timeout the process receives ``SIGTERM``; if it is still alive after
    ``kill_grace`` seconds it receives ``SIGKILL``.
    """

    def __init__(self, *, kill_grace: float = DEFAULT_KILL_GRACE) -> None:
        """Initialise the runner.

        Args:
            kill_grace: Seconds to wait after the graceful signal before
                forcefully killing the process.
        """

        self.kill_grace = kill_grace

    async def run(
        self,
        command: str,
        args: Sequence[str] = (),
        options: CommandOptions | None = None,
        *,
        context: RunContext | None = None,
    ) -> CommandResult:
        """Execute ``command`` with ``args`` and return a structured result.

        Args:
            command: Executable name or path.
            args: Argument vector passed verbatim to the executable.
            options: Execution options; defaults to :class:`CommandOptions`.
            context: Run context used for correlated logging.

        Returns:
            CommandResult: Captured output and exit metadata.
        """

        resolved = options or CommandOptions()
        ctx = ensure_context(context)
        argv = (command, *args)
        env = {**os.environ, **resolved.env} if resolved.env else None
        ctx.logger.debug("Executing command args=%s cwd=%s timeout=%s", " ".join(argv), resolved.cwd, resolved.timeout)

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=str(resolved.cwd) if resolved.cwd is not None else None,
                env=env,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE if resolved.capture_output else asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            ctx.logger.error("Command could not be spawned: %s (%s)", command, exc)
            return CommandResult(
                command=argv,
                success=False,
                stdout="",
                stderr=str(exc),
                exit_code=None,
                timed_out=False,
                spawn_error=str(exc),
            )

        communication = asyncio.ensure_future(process.communicate())
        timed_out = False
        try:
            await asyncio.wait_for(asyncio.shield(communication), timeout=resolved.timeout)
        except TimeoutError:
            timed_out = True
            ctx.logger.warning("Command timed out after %ss: %s", resolved.timeout, command)
            await self._terminate(process, communication)

        stdout_bytes, stderr_bytes = await communication
        exit_code = process.returncode
        result = CommandResult(
            command=argv,
            success=exit_code == 0 and not timed_out,
            stdout=_decode(stdout_bytes),
            stderr=_decode(stderr_bytes),
            exit_code=exit_code,
            timed_out=timed_out,
        )
        ctx.logger.debug(
            "Command completed args=%s exit_code=%s timed_out=%s success=%s",
            " ".join(argv),
            exit_code,
            timed_out,
            result.success,
        )
        return result

    async def _terminate(self, process: asyncio.subprocess.Process, communication: asyncio.Future[tuple[bytes, bytes]]) -> None:
        """Send the graceful signal, then escalate to a kill after the grace period."""

        if process.returncode is not None:
            return
        try:
            process.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(asyncio.shield(communication), timeout=self.kill_grace)
        except TimeoutError:
            try:
                process.kill()
            except ProcessLookupError:
                return


def _decode(payload: bytes | None) -> str:
    """Return ``payload`` decoded and trimmed."""

    if not payload:
        return ""
    return payload.decode("utf-8", errors=_DECODE_ERRORS).strip()


__all__ = [
    "CommandOptions",
    "CommandResult",
    "CommandRunner",
    "DEFAULT_KILL_GRACE",
    "DEFAULT_TIMEOUT",
    "END_OF_OPTIONS",
    "build_argv",
]
