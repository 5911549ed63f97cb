# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Interfaces consumed from analyzer and fixer collaborators."""

# pylint: disable=too-few-public-methods -- Protocol definitions intentionally expose minimal method surfaces.

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from ..context import RunContext
from ..models import CheckResult, FixOutcome


@runtime_checkable
class Analyzer(Protocol):
    """Run static analysis over files and report findings."""

    async def check(self, files: Sequence[Path], context: RunContext) -> CheckResult:
        """Return findings for ``files``.

        Raises:
            ToolExecutionError: If an analyzer could not be run to completion.
        """

        raise NotImplementedError


@runtime_checkable
class Fixer(Protocol):
    """Apply automatic fixes to a single file."""

    async def fix(self, file: Path, previous: CheckResult, context: RunContext) -> FixOutcome:
        """Fix ``file`` using the findings of the ``previous`` check.

        Raises:
            ToolExecutionError: If a fixer could not be run to completion.
        """

        raise NotImplementedError
