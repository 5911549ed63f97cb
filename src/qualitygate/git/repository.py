# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Repository inspection and staging built on :class:`CommandRunner`."""

from __future__ import annotations

import asyncio
import hashlib
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, TypeAlias

from ..context import RunContext, ensure_context
from ..core.concurrency import BoundedExecutor
from ..core.paths import normalize_path, normalize_paths
from ..core.process import DEFAULT_TIMEOUT, CommandOptions, CommandResult, CommandRunner, build_argv
from ..errors import StagingError, StagingErrorKind

LOGGER = logging.getLogger(__name__)

GIT_EXECUTABLE: Final[str] = "git"
MAX_STAGE_ATTEMPTS: Final[int] = 3
STAGE_RETRY_DELAY: Final[float] = 0.1
DEFAULT_READ_CONCURRENCY: Final[int] = 8
REBASE_MARKERS: Final[tuple[str, ...]] = ("rebase-merge", "rebase-apply")
MERGE_MARKER: Final[str] = "MERGE_HEAD"
CONFLICT_CODES: Final[frozenset[str]] = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})

REASON_MISSING: Final[str] = "File does not exist"
REASON_DIRECTORY: Final[str] = "Path is a directory"
REASON_LOCKED: Final[str] = "File is locked or in use"
REASON_IGNORED: Final[str] = "File is ignored by git"

_LOCK_MARKERS: Final[tuple[str, ...]] = ("index.lock", "unable to create", "another git process")
_PERMISSION_MARKERS: Final[tuple[str, ...]] = ("permission denied", "eacces", "operation not permitted")
_PATHSPEC_MARKERS: Final[tuple[str, ...]] = ("pathspec", "did not match any files", "enoent")
_READ_CHUNK: Final[int] = 65536

SleepFn: TypeAlias = Callable[[float], Awaitable[object]]


@dataclass(frozen=True, slots=True)
class StageResult:
    """Outcome of a staging request.

    Attributes:
        success: ``True`` when every requested file was added to the index.
        staged_files: Files added to the index (empty on failure).
        error: Human-readable failure description.
        error_kind: Classified failure cause.
        attempts: Number of ``git add`` invocations performed.
    """

    success: bool
    staged_files: frozenset[Path] = frozenset()
    error: str | None = None
    error_kind: StagingErrorKind | None = None
    attempts: int = 0

    def raise_for_error(self) -> StageResult:
        """Return ``self`` or raise :class:`StagingError` when staging failed."""

        if not self.success:
            raise StagingError(
                self.error or "Staging failed",
                kind=self.error_kind or StagingErrorKind.UNKNOWN,
                attempts=self.attempts,
            )
        return self


@dataclass(frozen=True, slots=True)
class RepositoryState:
    """Point-in-time snapshot of repository operations in progress."""

    in_rebase: bool = False
    has_conflicts: bool = False
    is_merging: bool = False


@dataclass(frozen=True, slots=True)
class FileSnapshot:
    """Content digests captured before a fix attempt."""

    digests: Mapping[Path, str] = field(default_factory=dict)

    def __contains__(self, path: object) -> bool:
        return path in self.digests

    def __len__(self) -> int:
        return len(self.digests)

    @property
    def paths(self) -> tuple[Path, ...]:
        """Return the captured paths in capture order."""

        return tuple(self.digests)


@dataclass(frozen=True, slots=True)
class ModificationReport:
    """Files whose content changed since a snapshot, plus read errors."""

    modified_files: tuple[Path, ...] = ()
    errors: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class EdgeCaseReport:
    """Partition of requested paths into readable files and skipped entries."""

    readable: tuple[Path, ...] = ()
    skipped: tuple[Path, ...] = ()
    reasons: Mapping[Path, str] = field(default_factory=dict)


def classify_staging_error(text: str) -> StagingErrorKind:
    """Return the recognised cause of a failed ``git add``.

    Args:
        text: Error output produced by git.

    Returns:
        StagingErrorKind: Classified cause, ``UNKNOWN`` when unrecognised.
    """

    lowered = text.lower()
    # "Unable to create '...index.lock': Permission denied" is not contention.
    if any(marker in lowered for marker in _PERMISSION_MARKERS):
        return StagingErrorKind.PERMISSION_DENIED
    if any(marker in lowered for marker in _LOCK_MARKERS):
        return StagingErrorKind.LOCK_CONTENTION
    if any(marker in lowered for marker in _PATHSPEC_MARKERS):
        return StagingErrorKind.PATHSPEC_MISMATCH
    return StagingErrorKind.UNKNOWN


def _staging_message(kind: StagingErrorKind, detail: str, attempts: int) -> str:
    if kind is StagingErrorKind.LOCK_CONTENTION:
        return f"Git index is locked by another process (gave up after {attempts} attempts): {detail}"
    if kind is StagingErrorKind.PERMISSION_DENIED:
        return f"Permission denied while staging files; check file and repository permissions: {detail}"
    if kind is StagingErrorKind.PATHSPEC_MISMATCH:
        return f"Some files could not be found; they may have been moved or deleted: {detail}"
    return detail


def _digest(path: Path) -> str:
    hasher = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_READ_CHUNK), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


class RepositoryOperations:
    """Stateless git operations bound to a working directory.

    The service holds only its command runner and configuration; every
    observation (state, staged files, snapshots) is recomputed per call.
    """

    def __init__(
        self,
        runner: CommandRunner,
        root: Path,
        *,
        timeout: float | None = DEFAULT_TIMEOUT,
        sleep: SleepFn = asyncio.sleep,
        read_concurrency: int = DEFAULT_READ_CONCURRENCY,
    ) -> None:
        """Initialise the service.

        Args:
            runner: Command runner used for every git invocation.
            root: Working directory git commands run in.
            timeout: Per-command timeout in seconds.
            sleep: Awaitable delay used between staging retries.
            read_concurrency: Maximum parallel file reads when snapshotting.
        """

        self.runner = runner
        self.root = Path(root)
        self.timeout = timeout
        self._sleep = sleep
        self._read_concurrency = read_concurrency

    async def _git(self, args: Sequence[str], context: RunContext | None) -> CommandResult:
        options = CommandOptions(cwd=self.root, timeout=self.timeout)
        return await self.runner.run(GIT_EXECUTABLE, args, options, context=context)

    # ------------------------------------------------------------------
    # Staging

    async def stage(self, files: Iterable[Path | str], context: RunContext | None = None) -> StageResult:
        """Add ``files`` to the index, retrying on lock contention.

        Args:
            files: Files to stage. An empty collection performs no git call.
            context: Run context used for correlated logging.

        Returns:
            StageResult: Staging outcome including the number of attempts.

        Raises:
            PathValidationError: If any entry is empty.
            ToolExecutionError: If git could not be spawned or timed out.
        """

        ctx = ensure_context(context)
        requested = list(files)
        if not requested:
            return StageResult(success=True)
        normalized = normalize_paths(requested, self.root)
        argv = build_argv(["add"], normalized)

        attempt = 0
        while True:
            attempt += 1
            result = (await self._git(argv, ctx)).ensure_completed()
            if result.success:
                ctx.logger.debug("Staged %d file(s) after %d attempt(s)", len(normalized), attempt)
                return StageResult(success=True, staged_files=frozenset(normalized), attempts=attempt)

            detail = result.stderr or result.stdout or f"git add exited with status {result.exit_code}"
            kind = classify_staging_error(detail)
            if kind is StagingErrorKind.LOCK_CONTENTION and attempt < MAX_STAGE_ATTEMPTS:
                delay = STAGE_RETRY_DELAY * attempt
                ctx.logger.warning("Git index locked; retrying in %.2fs (attempt %d/%d)", delay, attempt, MAX_STAGE_ATTEMPTS)
                await self._sleep(delay)
                continue

            message = _staging_message(kind, detail, attempt)
            ctx.logger.error("Staging failed (%s): %s", kind.value, message)
            return StageResult(success=False, error=message, error_kind=kind, attempts=attempt)

    async def get_staged_files(self, context: RunContext | None = None) -> list[Path]:
        """Return added, copied or modified files currently in the index."""

        result = (await self._git(["diff", "--cached", "--name-only", "--diff-filter=ACM"], context)).ensure_completed()
        if not result.success:
            return []
        toplevel = await self._toplevel(context)
        return [toplevel / line for line in result.stdout.splitlines() if line.strip()]

    async def has_partial_staging(self, file: Path | str, context: RunContext | None = None) -> bool:
        """Return ``True`` when ``file`` has both staged and unstaged changes."""

        target = normalize_path(file, self.root)
        staged = await self._git(build_argv(["diff", "--cached", "--name-only"], [target]), context)
        unstaged = await self._git(build_argv(["diff", "--name-only"], [target]), context)
        if not (staged.success and unstaged.success):
            return False
        return bool(staged.stdout) and bool(unstaged.stdout)

    async def ignored_files(self, files: Iterable[Path | str], context: RunContext | None = None) -> frozenset[Path]:
        """Return the entries of ``files`` excluded by ``.gitignore`` rules.

        Tracked files are never reported. Outside a repository, or when git
        cannot be run, nothing is considered ignored.
        """

        ctx = ensure_context(context)
        requested = normalize_paths(files, self.root)
        if not requested:
            return frozenset()
        result = await self._git(build_argv(["check-ignore"], requested), ctx)
        # check-ignore exits 1 when no path is ignored.
        if result.exit_code not in {0, 1}:
            ctx.logger.debug("git check-ignore unavailable: %s", result.spawn_error or result.stderr)
            return frozenset()
        ignored = frozenset(normalize_path(line, self.root) for line in result.stdout.splitlines() if line.strip())
        if ignored:
            ctx.logger.debug("Ignoring %d git-ignored file(s)", len(ignored))
        return ignored

    # ------------------------------------------------------------------
    # Repository state

    async def is_repository(self, context: RunContext | None = None) -> bool:
        """Return ``True`` when :attr:`root` lies inside a git work tree."""

        result = await self._git(["rev-parse", "--is-inside-work-tree"], context)
        return result.success and result.stdout == "true"

    async def get_repository_state(self, context: RunContext | None = None) -> RepositoryState:
        """Return rebase, merge and conflict flags for the repository.

        Outside a repository, or when git cannot be run, every flag is
        ``False``.
        """

        ctx = ensure_context(context)
        git_dir_result = await self._git(["rev-parse", "--git-dir"], ctx)
        if not git_dir_result.success or not git_dir_result.stdout:
            ctx.logger.debug("Not a git repository: %s", self.root)
            return RepositoryState()

        git_dir = Path(git_dir_result.stdout)
        if not git_dir.is_absolute():
            git_dir = self.root / git_dir
        in_rebase = any((git_dir / marker).exists() for marker in REBASE_MARKERS)
        is_merging = (git_dir / MERGE_MARKER).exists()

        status = await self._git(["status", "--porcelain"], ctx)
        has_conflicts = status.success and any(line[:2] in CONFLICT_CODES for line in status.stdout.splitlines())
        state = RepositoryState(in_rebase=in_rebase, has_conflicts=has_conflicts, is_merging=is_merging)
        ctx.logger.debug("Repository state: %s", state)
        return state

    async def _toplevel(self, context: RunContext | None) -> Path:
        result = await self._git(["rev-parse", "--show-toplevel"], context)
        return Path(result.stdout) if result.success and result.stdout else self.root

    # ------------------------------------------------------------------
    # Content snapshots

    async def capture_file_states(self, files: Iterable[Path | str]) -> FileSnapshot:
        """Record a content digest for every readable file in ``files``.

        Missing or unreadable files are left out of the snapshot.
        """

        paths = normalize_paths(files, self.root)
        executor = BoundedExecutor(self._read_concurrency)
        digests = await executor.map(paths, self._safe_digest)
        return FileSnapshot({path: digest for path, digest in zip(paths, digests, strict=True) if digest is not None})

    async def detect_modified_files(
        self,
        snapshot: FileSnapshot,
        files: Iterable[Path | str] | None = None,
    ) -> ModificationReport:
        """Compare current content with ``snapshot``.

        Args:
            snapshot: Digests captured before the fix attempt.
            files: Optional subset of snapshot paths to compare.

        Returns:
            ModificationReport: Changed files in snapshot order and any read errors.
        """

        candidates = snapshot.paths if files is None else tuple(normalize_paths(files, self.root))
        tracked = [path for path in candidates if path in snapshot]
        executor = BoundedExecutor(self._read_concurrency)
        outcomes = await executor.map(tracked, self._compare_digest(snapshot))

        modified: list[Path] = []
        errors: list[str] = []
        for path, (changed, error) in zip(tracked, outcomes, strict=True):
            if error is not None:
                errors.append(error)
            elif changed:
                modified.append(path)
        return ModificationReport(modified_files=tuple(modified), errors=tuple(errors))

    def _compare_digest(self, snapshot: FileSnapshot) -> Callable[[Path], Awaitable[tuple[bool, str | None]]]:
        async def compare(path: Path) -> tuple[bool, str | None]:
            try:
                current = await asyncio.to_thread(_digest, path)
            except FileNotFoundError:
                LOGGER.debug("Skipping deleted file %s", path)
                return False, None
            except OSError as exc:
                return False, f"Error checking {path}: {exc}"
            return current != snapshot.digests[path], None

        return compare

    @staticmethod
    async def _safe_digest(path: Path) -> str | None:
        try:
            return await asyncio.to_thread(_digest, path)
        except OSError as exc:
            LOGGER.debug("Not snapshotting %s: %s", path, exc)
            return None

    # ------------------------------------------------------------------
    # Edge cases

    def handle_edge_cases(self, files: Iterable[Path | str]) -> EdgeCaseReport:
        """Filter out missing paths, directories and unreadable files.

        Args:
            files: Paths requested by the caller.

        Returns:
            EdgeCaseReport: Readable files plus skipped paths with reasons.
        """

        readable: list[Path] = []
        skipped: list[Path] = []
        reasons: dict[Path, str] = {}
        for path in normalize_paths(files, self.root):
            reason = _edge_case_reason(path)
            if reason is None:
                readable.append(path)
                continue
            skipped.append(path)
            reasons[path] = reason
        return EdgeCaseReport(readable=tuple(readable), skipped=tuple(skipped), reasons=reasons)


def _edge_case_reason(path: Path) -> str | None:
    if not path.exists():
        return REASON_MISSING
    if path.is_dir():
        return REASON_DIRECTORY
    try:
        with path.open("rb"):
            pass
    except OSError:
        return REASON_LOCKED
    return None


__all__ = [
    "CONFLICT_CODES",
    "MAX_STAGE_ATTEMPTS",
    "STAGE_RETRY_DELAY",
    "EdgeCaseReport",
    "FileSnapshot",
    "ModificationReport",
    "RepositoryOperations",
    "RepositoryState",
    "StageResult",
    "classify_staging_error",
]
