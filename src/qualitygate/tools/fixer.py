# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Fixer collaborator applying Ruff autofixes and formatting."""

from __future__ import annotations

import asyncio
from pathlib import Path

from ..config.models import ExecutionConfig, ToolsConfig
from ..context import RunContext
from ..core.process import CommandOptions, CommandRunner, build_argv
from ..decision.classifier import Classifier
from ..models import CheckResult, Engine, FixOutcome
from .analyzer import COMPLETED_STATUSES


def _read_bytes(path: Path) -> bytes | None:
    try:
        return path.read_bytes()
    except OSError:
        return None


class ToolFixer:
    """Fix one file with ``ruff check --fix-only`` followed by ``ruff format``.

    Only rules the classifier considers fixable for the file are selected,
    so a fix pass never touches findings that require review.
    """

    def __init__(
        self,
        runner: CommandRunner,
        root: Path,
        classifier: Classifier | None = None,
        tools: ToolsConfig | None = None,
        execution: ExecutionConfig | None = None,
    ) -> None:
        self.runner = runner
        self.root = Path(root)
        self.classifier = classifier or Classifier()
        self.tools = tools or ToolsConfig()
        self.execution = execution or ExecutionConfig()

    def fixable_rules(self, file: Path, previous: CheckResult) -> list[str]:
        """Return the sorted lint rule ids that may be fixed in ``file``."""

        rules = {
            finding.rule_id
            for finding in previous.findings
            if finding.file == file
            and finding.engine is Engine.LINT
            and finding.rule_id
            and self.classifier.is_fixable(finding)
        }
        return sorted(rules)

    async def fix(self, file: Path, previous: CheckResult, context: RunContext) -> FixOutcome:
        """Apply fixes to ``file``.

        Raises:
            ToolExecutionError: If Ruff could not be spawned or timed out.
        """

        if not self.tools.ruff:
            context.logger.debug("Ruff disabled; nothing to fix in %s", file)
            return FixOutcome(success=True)

        before = await asyncio.to_thread(_read_bytes, file)
        options = CommandOptions(cwd=self.root, timeout=self.execution.command_timeout)
        success = True

        rules = self.fixable_rules(file, previous)
        if rules:
            args = build_argv(["check", "--fix-only", "--select", ",".join(rules)], [file])
            result = (await self.runner.run(self.tools.ruff_executable, args, options, context=context)).ensure_completed()
            success = success and result.exit_code in COMPLETED_STATUSES

        result = (
            await self.runner.run(self.tools.ruff_executable, build_argv(["format"], [file]), options, context=context)
        ).ensure_completed()
        success = success and result.success

        after = await asyncio.to_thread(_read_bytes, file)
        modified = frozenset({file}) if after is not None and after != before else frozenset()
        context.logger.debug("Fixer finished for %s success=%s modified=%s", file, success, bool(modified))
        return FixOutcome(success=success, modified_files=modified)


__all__ = ["ToolFixer"]
