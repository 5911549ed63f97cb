# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Git repository services."""

from __future__ import annotations

from .repository import (
    MAX_STAGE_ATTEMPTS,
    EdgeCaseReport,
    FileSnapshot,
    ModificationReport,
    RepositoryOperations,
    RepositoryState,
    StageResult,
    classify_staging_error,
)

__all__ = [
    "MAX_STAGE_ATTEMPTS",
    "EdgeCaseReport",
    "FileSnapshot",
    "ModificationReport",
    "RepositoryOperations",
    "RepositoryState",
    "StageResult",
    "classify_staging_error",
]
