# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the asynchronous command runner."""

from __future__ import annotations

import signal
import sys
from pathlib import Path

import pytest

from qualitygate.core.process import CommandOptions, CommandRunner, build_argv
from qualitygate.errors import ToolExecutionError

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals required")


@pytest.mark.asyncio
async def test_run_captures_trimmed_stdout() -> None:
    result = await CommandRunner().run(sys.executable, ["-c", "print('  hello  ')"])

    assert result.success is True
    assert result.exit_code == 0
    assert result.stdout == "hello"
    assert result.stderr == ""
    assert result.timed_out is False
    assert result.command[0] == sys.executable


@pytest.mark.asyncio
async def test_non_zero_exit_is_reported_not_raised() -> None:
    script = "import sys; sys.stdout.write('out'); sys.stderr.write('boom\\n'); sys.exit(3)"

    result = await CommandRunner().run(sys.executable, ["-c", script])

    assert result.success is False
    assert result.exit_code == 3
    assert result.stdout == "out"
    assert result.stderr == "boom"
    assert result.spawn_error is None
    assert result.ensure_completed() is result


@pytest.mark.asyncio
async def test_spawn_failure_has_no_exit_code(tmp_path: Path) -> None:
    missing = tmp_path / "definitely-not-a-command"

    result = await CommandRunner().run(str(missing), ["--version"])

    assert result.success is False
    assert result.exit_code is None
    assert result.spawn_error
    with pytest.raises(ToolExecutionError) as excinfo:
        result.ensure_completed()
    assert excinfo.value.timed_out is False


@posix_only
@pytest.mark.asyncio
async def test_timeout_sends_graceful_termination() -> None:
    options = CommandOptions(timeout=0.3)

    result = await CommandRunner().run(sys.executable, ["-c", "import time; time.sleep(30)"], options)

    assert result.timed_out is True
    assert result.success is False
    assert result.exit_code == -signal.SIGTERM
    with pytest.raises(ToolExecutionError) as excinfo:
        result.ensure_completed()
    assert excinfo.value.timed_out is True


@posix_only
@pytest.mark.asyncio
async def test_timeout_escalates_to_kill_when_termination_is_ignored() -> None:
    script = "import signal, time; signal.signal(signal.SIGTERM, signal.SIG_IGN); time.sleep(30)"
    runner = CommandRunner(kill_grace=0.3)

    result = await runner.run(sys.executable, ["-c", script], CommandOptions(timeout=1.0))

    assert result.timed_out is True
    assert result.exit_code == -signal.SIGKILL


@pytest.mark.asyncio
async def test_env_entries_are_merged_over_inherited_environment() -> None:
    script = "import os; print(os.environ['QG_VALUE'], bool(os.environ.get('PATH')))"
    options = CommandOptions(env={"QG_VALUE": "42"})

    result = await CommandRunner().run(sys.executable, ["-c", script], options)

    assert result.stdout == "42 True"


@pytest.mark.asyncio
async def test_stdout_can_be_discarded_while_stderr_is_kept() -> None:
    script = "import sys; print('visible'); sys.stderr.write('kept')"
    options = CommandOptions(capture_output=False)

    result = await CommandRunner().run(sys.executable, ["-c", script], options)

    assert result.stdout == ""
    assert result.stderr == "kept"


@pytest.mark.asyncio
async def test_stdin_is_detached() -> None:
    result = await CommandRunner().run(sys.executable, ["-c", "import sys; print(repr(sys.stdin.read()))"])

    assert result.stdout == "''"


@pytest.mark.asyncio
async def test_cwd_is_honoured(tmp_path: Path) -> None:
    options = CommandOptions(cwd=tmp_path)

    result = await CommandRunner().run(sys.executable, ["-c", "import os; print(os.getcwd())"], options)

    assert Path(result.stdout).resolve() == tmp_path.resolve()


@pytest.mark.asyncio
async def test_dash_prefixed_path_is_passed_as_operand(tmp_path: Path) -> None:
    script = "import sys; print('|'.join(sys.argv[1:]))"
    argv = ["-c", script, *build_argv(["add"], ["-rf"])]

    result = await CommandRunner().run(sys.executable, argv)

    assert result.stdout == "add|--|-rf"


def test_build_argv_places_separator_before_paths(tmp_path: Path) -> None:
    assert build_argv(["add"], [tmp_path / "-n.py", "--force"]) == ["add", "--", str(tmp_path / "-n.py"), "--force"]
    assert build_argv(["diff", "--cached"], []) == ["diff", "--cached", "--"]


def test_negative_timeout_is_rejected() -> None:
    with pytest.raises(ValueError):
        CommandOptions(timeout=-1)
