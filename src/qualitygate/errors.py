# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception taxonomy shared by the quality gate services."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum


class QualityGateError(Exception):
    """Base class for errors raised by quality gate services."""


class ConfigError(QualityGateError):
    """Raised when configuration input is invalid."""


class PathValidationError(QualityGateError, ValueError):
    """Raised when a path cannot be placed on a command line."""


class ToolExecutionError(QualityGateError):
    """Raised when an external command could not be spawned or timed out."""

    def __init__(self, command: Sequence[str], reason: str, *, timed_out: bool = False) -> None:
        """Initialise the error with the offending command.

        Args:
            command: Argument vector that failed to execute.
            reason: Human-readable explanation of the failure.
            timed_out: ``True`` when the command exceeded its timeout.
        """

        head = command[0] if command else "<empty>"
        super().__init__(f"Command '{head}' failed: {reason}")
        self.command = tuple(command)
        self.reason = reason
        self.timed_out = timed_out


class StagingErrorKind(str, Enum):
    """Enumerate recognised causes of a staging failure."""

    LOCK_CONTENTION = "lock_contention"
    PERMISSION_DENIED = "permission_denied"
    PATHSPEC_MISMATCH = "pathspec_mismatch"
    PARTIAL_STAGING = "partial_staging"
    UNKNOWN = "unknown"


class StagingError(QualityGateError):
    """Raised when fixed files could not be added to the index."""

    def __init__(self, message: str, *, kind: StagingErrorKind = StagingErrorKind.UNKNOWN, attempts: int = 1) -> None:
        """Initialise the error with its classified cause.

        Args:
            message: Human-readable explanation suitable for end users.
            kind: Classified cause of the failure.
            attempts: Number of staging attempts made before giving up.
        """

        super().__init__(message)
        self.kind = kind
        self.attempts = attempts


class ConcurrencyTimeoutError(QualityGateError, TimeoutError):
    """Raised when a bounded task exceeds its configured timeout."""


__all__ = [
    "ConcurrencyTimeoutError",
    "ConfigError",
    "PathValidationError",
    "QualityGateError",
    "StagingError",
    "StagingErrorKind",
    "ToolExecutionError",
]
