# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Install the quality gate as a git ``pre-commit`` hook."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

from ..logging import info, ok, warn

LOGGER = logging.getLogger(__name__)

GIT_EXECUTABLE: Final[str] = "git"
HOOK_NAME: Final[str] = "pre-commit"
MANAGED_MARKER: Final[str] = "# managed-by: quality-gate"
HOOK_SCRIPT: Final[str] = f"""#!/bin/sh
{MANAGED_MARKER}
exec quality-gate git-hook
"""


@dataclass(slots=True)
class InstallResult:
    """Aggregate outcome from attempting to install git hooks."""

    installed: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    backups: list[Path] = field(default_factory=list)


def is_managed(hook: Path) -> bool:
    """Return ``True`` when ``hook`` was written by this installer."""

    try:
        return MANAGED_MARKER in hook.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return False


def _git_hooks_path(root: Path) -> Path | None:
    """Return the hooks directory git reports for ``root``, or ``None``."""

    try:
        completed = subprocess.run(
            [GIT_EXECUTABLE, "rev-parse", "--git-path", "hooks"],
            cwd=root,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        LOGGER.debug("git unavailable while locating hooks: %s", exc)
        return None
    output = completed.stdout.strip()
    if completed.returncode != 0 or not output:
        LOGGER.debug("git rev-parse --git-path hooks failed: %s", completed.stderr.strip())
        return None
    return (root / output).resolve()


def _hooks_directory(root: Path) -> Path:
    # Worktrees, submodules and core.hooksPath all move the hooks directory.
    resolved = root.resolve()
    hooks_dir = _git_hooks_path(resolved)
    if hooks_dir is not None:
        return hooks_dir
    git_dir = resolved / ".git"
    if not git_dir.is_dir():
        raise FileNotFoundError("Not a git repository (missing .git directory)")
    return git_dir / "hooks"


def install_hooks(root: Path, *, dry_run: bool = False, force: bool = False) -> InstallResult:
    """Write the ``pre-commit`` hook for the repository at ``root``.

    An existing hook written by another tool is left alone unless ``force``
    is set, in which case it is renamed with a timestamped ``.backup`` suffix
    first. A previously installed quality gate hook is replaced in place.

    Args:
        root: Repository root directory.
        dry_run: Report the actions without touching the filesystem.
        force: Replace a foreign hook after backing it up.

    Returns:
        InstallResult: Installed, skipped and backed-up hook paths.

    Raises:
        FileNotFoundError: If ``root`` is not a git repository.
    """

    target_dir = _hooks_directory(root)
    destination = target_dir / HOOK_NAME
    result = InstallResult()

    if destination.exists() and not is_managed(destination):
        if not force:
            warn(f"Existing {HOOK_NAME} hook at {destination} left untouched (use --force to replace)")
            result.skipped.append(destination)
            return result
        timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
        backup_path = destination.with_name(f"{HOOK_NAME}.backup.{timestamp}")
        info(f"Backing up existing {HOOK_NAME} hook to {backup_path}")
        if not dry_run:
            destination.rename(backup_path)
        result.backups.append(backup_path)

    info(f"Installing {HOOK_NAME} hook")
    result.installed.append(destination)
    if dry_run:
        ok(f"Dry run complete: would install {len(result.installed)} hook(s)")
        return result

    target_dir.mkdir(parents=True, exist_ok=True)
    destination.write_text(HOOK_SCRIPT, encoding="utf-8")
    destination.chmod(0o755)
    ok(f"Installed {len(result.installed)} hook(s)")
    return result


__all__ = ["HOOK_NAME", "HOOK_SCRIPT", "MANAGED_MARKER", "InstallResult", "install_hooks", "is_managed"]
