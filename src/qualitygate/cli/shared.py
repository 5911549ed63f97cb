# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (output, errors, exit codes)."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Any, Final

import typer

from ..core.paths import display_path
from ..logging import fail as core_fail
from ..logging import info as core_info
from ..logging import ok as core_ok
from ..logging import plain as core_plain
from ..logging import section as core_section
from ..logging import warn as core_warn
from ..models import Finding, OrchestrationResult

TEXT_FORMAT: Final[str] = "text"
JSON_FORMAT: Final[str] = "json"
OUTPUT_FORMATS: Final[tuple[str, ...]] = (TEXT_FORMAT, JSON_FORMAT)


class ExitCode(IntEnum):
    """Process exit statuses used by the facades."""

    PASS = 0
    BLOCKED = 1
    AGENT_BLOCKED = 2
    TOOL_FAILURE = 3


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = ExitCode.BLOCKED) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = int(exit_code)


@dataclass(slots=True)
class CLILogger:
    """Adapter around project output helpers respecting CLI preferences."""

    use_emoji: bool = True
    use_color: bool = True
    stderr: bool = False

    def fail(self, message: str) -> None:
        """Log a failure message."""

        core_fail(message, use_emoji=self.use_emoji, use_color=self.use_color, stderr=self.stderr)

    def warn(self, message: str) -> None:
        """Log a warning message."""

        core_warn(message, use_emoji=self.use_emoji, use_color=self.use_color, stderr=self.stderr)

    def ok(self, message: str) -> None:
        """Log a success message."""

        core_ok(message, use_emoji=self.use_emoji, use_color=self.use_color, stderr=self.stderr)

    def info(self, message: str) -> None:
        """Log an informational message."""

        core_info(message, use_emoji=self.use_emoji, use_color=self.use_color, stderr=self.stderr)

    def section(self, title: str) -> None:
        """Print a section header."""

        core_section(title, use_color=self.use_color, stderr=self.stderr)

    def echo(self, message: str) -> None:
        """Write ``message`` without decoration."""

        core_plain(message, stderr=self.stderr)

    def findings(self, findings: tuple[Finding, ...], root: Path) -> None:
        """Write one line per finding relative to ``root``."""

        for finding in findings:
            self.echo(finding.render(root))


def build_cli_logger(*, emoji: bool = True, color: bool = True, stderr: bool = False) -> CLILogger:
    """Return a :class:`CLILogger` configured for the provided preferences."""

    return CLILogger(use_emoji=emoji, use_color=color, stderr=stderr)


def resolve_output_format(value: str) -> str:
    """Return the lower-cased output format or raise :class:`typer.BadParameter`."""

    normalized = value.lower()
    if normalized not in OUTPUT_FORMATS:
        raise typer.BadParameter(f"Unsupported output format '{value}'; choose one of: {', '.join(OUTPUT_FORMATS)}")
    return normalized


def _finding_payload(finding: Finding, root: Path) -> dict[str, Any]:
    payload = finding.model_dump(mode="json", exclude_none=True)
    payload["file"] = display_path(finding.file, root)
    return payload


def render_result_json(result: OrchestrationResult, root: Path) -> str:
    """Return ``result`` as an indented JSON document with root-relative paths."""

    payload = {
        "outcome": result.outcome.value,
        "correlation_id": result.correlation_id,
        "error": result.error,
        "findings": [_finding_payload(finding, root) for finding in result.findings],
        "staged_files": sorted(display_path(path, root) for path in result.staged_files),
        "skipped": {display_path(path, root): reason for path, reason in result.skipped.items()},
    }
    return json.dumps(payload, indent=2)


__all__ = [
    "JSON_FORMAT",
    "OUTPUT_FORMATS",
    "TEXT_FORMAT",
    "CLIError",
    "CLILogger",
    "ExitCode",
    "build_cli_logger",
    "render_result_json",
    "resolve_output_format",
]
