# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Analyzer collaborator running Ruff and MyPy."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final, TypeAlias

from ..config.models import ExecutionConfig, ToolsConfig
from ..context import RunContext
from ..core.concurrency import BoundedExecutor
from ..core.process import CommandOptions, CommandResult, CommandRunner, build_argv
from ..errors import ToolExecutionError
from ..models import CheckResult, Finding
from .parsers import parse_mypy, parse_ruff_check, parse_ruff_format

# Exit statuses meaning "ran to completion", with or without findings.
COMPLETED_STATUSES: Final[frozenset[int]] = frozenset({0, 1})
FINDINGS_STATUS: Final[int] = 1

OutputParser: TypeAlias = Callable[[str, Path], list[Finding]]


@dataclass(frozen=True, slots=True)
class AnalyzerJob:
    """Single analyzer command and the parser for its output."""

    name: str
    executable: str
    args: tuple[str, ...]
    parser: OutputParser


def select_files(files: Sequence[Path], extensions: Sequence[str]) -> list[Path]:
    """Return the entries of ``files`` whose suffix is in ``extensions``."""

    wanted = {ext.lower() for ext in extensions}
    return [path for path in files if path.suffix.lower() in wanted]


class ToolAnalyzer:
    """Run the configured analyzers in parallel and merge their findings."""

    def __init__(
        self,
        runner: CommandRunner,
        root: Path,
        tools: ToolsConfig | None = None,
        execution: ExecutionConfig | None = None,
    ) -> None:
        self.runner = runner
        self.root = Path(root)
        self.tools = tools or ToolsConfig()
        self.execution = execution or ExecutionConfig()

    def jobs(self, files: Sequence[Path]) -> list[AnalyzerJob]:
        """Return the analyzer commands to run for ``files``."""

        jobs: list[AnalyzerJob] = []
        if self.tools.ruff:
            jobs.append(
                AnalyzerJob(
                    name="ruff-check",
                    executable=self.tools.ruff_executable,
                    args=tuple(build_argv(["check", "--output-format", "json", "--no-fix"], files)),
                    parser=parse_ruff_check,
                )
            )
            jobs.append(
                AnalyzerJob(
                    name="ruff-format",
                    executable=self.tools.ruff_executable,
                    args=tuple(build_argv(["format", "--check", "--output-format", "json"], files)),
                    parser=parse_ruff_format,
                )
            )
        if self.tools.mypy:
            jobs.append(
                AnalyzerJob(
                    name="mypy",
                    executable=self.tools.mypy_executable,
                    args=tuple(build_argv(["--output", "json", *self.tools.mypy_args], files)),
                    parser=parse_mypy,
                )
            )
        return jobs

    async def check(self, files: Sequence[Path], context: RunContext) -> CheckResult:
        """Run every enabled analyzer over ``files``.

        Args:
            files: Files to analyse. Unsupported extensions are ignored.
            context: Run context used for correlated logging.

        Returns:
            CheckResult: Merged findings from all analyzers.

        Raises:
            ToolExecutionError: If an analyzer could not be spawned, timed
                out, crashed or produced unparseable output.
        """

        selected = select_files(files, self.tools.extensions)
        if not selected:
            context.logger.debug("No analyzable files among %d candidate(s)", len(files))
            return CheckResult(success=True)

        executor = BoundedExecutor(self.execution.max_concurrency)

        async def run_job(job: AnalyzerJob) -> list[Finding]:
            return await self._run_job(job, context)

        batches = await executor.map(self.jobs(selected), run_job)
        wanted = set(selected)
        reported = [finding for batch in batches for finding in batch]
        findings = tuple(finding for finding in reported if finding.file in wanted)
        dropped = len(reported) - len(findings)
        if dropped:
            context.logger.debug("Dropped %d finding(s) for files outside the checked set", dropped)
        context.logger.debug("Analyzers reported %d finding(s) for %d file(s)", len(findings), len(selected))
        return CheckResult(success=not findings, findings=findings)

    async def _run_job(self, job: AnalyzerJob, context: RunContext) -> list[Finding]:
        options = CommandOptions(
            cwd=self.root,
            timeout=self.execution.command_timeout,
        )
        result = (await self.runner.run(job.executable, job.args, options, context=context)).ensure_completed()
        _ensure_status(job, result)
        try:
            findings = job.parser(result.stdout, self.root)
        except ValueError as exc:
            raise ToolExecutionError(result.command, f"unparseable {job.name} output: {exc}") from exc
        if result.exit_code == FINDINGS_STATUS and not findings:
            detail = result.stderr or result.stdout or "no output"
            raise ToolExecutionError(result.command, f"{job.name} reported problems but no parseable findings: {detail}")
        return findings


def _ensure_status(job: AnalyzerJob, result: CommandResult) -> None:
    if result.exit_code in COMPLETED_STATUSES:
        return
    detail = result.stderr or result.stdout or "no output"
    raise ToolExecutionError(result.command, f"{job.name} exited with status {result.exit_code}: {detail}")


__all__ = ["COMPLETED_STATUSES", "FINDINGS_STATUS", "AnalyzerJob", "ToolAnalyzer", "select_files"]
