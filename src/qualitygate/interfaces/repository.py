# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Repository service interface used by the fix orchestrator."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ..context import RunContext

if TYPE_CHECKING:
    from ..git.repository import EdgeCaseReport, FileSnapshot, ModificationReport, RepositoryState, StageResult


@runtime_checkable
class Repository(Protocol):
    """Operations the orchestrator performs against version control."""

    def handle_edge_cases(self, files: Iterable[Path | str]) -> EdgeCaseReport:
        """Partition ``files`` into readable and skipped entries."""

        raise NotImplementedError

    async def get_repository_state(self, context: RunContext | None = None) -> RepositoryState:
        """Return rebase, merge and conflict flags."""

        raise NotImplementedError

    async def capture_file_states(self, files: Iterable[Path | str]) -> FileSnapshot:
        """Record content digests for ``files``."""

        raise NotImplementedError

    async def detect_modified_files(
        self,
        snapshot: FileSnapshot,
        files: Iterable[Path | str] | None = None,
    ) -> ModificationReport:
        """Return files whose content differs from ``snapshot``."""

        raise NotImplementedError

    async def has_partial_staging(self, file: Path | str, context: RunContext | None = None) -> bool:
        """Return ``True`` when ``file`` has staged and unstaged changes."""

        raise NotImplementedError

    async def ignored_files(self, files: Iterable[Path | str], context: RunContext | None = None) -> frozenset[Path]:
        """Return the subset of ``files`` excluded by git ignore rules."""

        raise NotImplementedError

    async def stage(self, files: Iterable[Path | str], context: RunContext | None = None) -> StageResult:
        """Add ``files`` to the index."""

        raise NotImplementedError
