# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for hook installation utilities."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

import pytest
from typer.testing import CliRunner

from qualitygate.cli.app import app
from qualitygate.hooks import HOOK_NAME, HOOK_SCRIPT, MANAGED_MARKER, install_hooks, is_managed


def _make_repo(root: Path) -> Path:
    hooks_dir = root / ".git" / "hooks"
    hooks_dir.mkdir(parents=True, exist_ok=True)
    return hooks_dir


def test_install_hooks_writes_executable_script(tmp_path: Path) -> None:
    hooks_dir = _make_repo(tmp_path)

    result = install_hooks(tmp_path)

    hook = hooks_dir / HOOK_NAME
    assert result.installed == [hook.resolve()]
    assert hook.read_text(encoding="utf-8") == HOOK_SCRIPT
    assert MANAGED_MARKER in HOOK_SCRIPT
    assert "quality-gate git-hook" in HOOK_SCRIPT
    assert os.access(hook, os.X_OK)
    assert is_managed(hook)


def test_install_hooks_creates_missing_hooks_directory(tmp_path: Path) -> None:
    (tmp_path / ".git").mkdir()

    install_hooks(tmp_path)

    assert (tmp_path / ".git" / "hooks" / HOOK_NAME).is_file()


def test_install_hooks_requires_git_directory(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="Not a git repository"):
        install_hooks(tmp_path)


def _git(root: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=root, check=True, capture_output=True)


def test_install_hooks_honours_core_hooks_path(git_repo: Path) -> None:
    _git(git_repo, "config", "core.hooksPath", "custom-hooks")

    install_hooks(git_repo)

    assert (git_repo / "custom-hooks" / HOOK_NAME).is_file()
    assert not (git_repo / ".git" / "hooks" / HOOK_NAME).exists()


def test_install_hooks_from_linked_worktree_uses_shared_hooks(git_repo: Path) -> None:
    _git(git_repo, "commit", "--allow-empty", "-q", "-m", "init")
    worktree = git_repo.parent / "worktree"
    _git(git_repo, "worktree", "add", "-q", str(worktree))
    assert (worktree / ".git").is_file()

    result = install_hooks(worktree)

    assert result.installed == [(git_repo / ".git" / "hooks" / HOOK_NAME).resolve()]
    assert is_managed(result.installed[0])


def test_foreign_hook_is_left_alone_without_force(tmp_path: Path) -> None:
    hooks_dir = _make_repo(tmp_path)
    hook = hooks_dir / HOOK_NAME
    hook.write_text("#!/bin/sh\necho custom\n", encoding="utf-8")

    result = install_hooks(tmp_path)

    assert result.installed == []
    assert result.skipped == [hook.resolve()]
    assert hook.read_text(encoding="utf-8") == "#!/bin/sh\necho custom\n"


def test_force_backs_up_foreign_hook(tmp_path: Path) -> None:
    hooks_dir = _make_repo(tmp_path)
    hook = hooks_dir / HOOK_NAME
    hook.write_text("#!/bin/sh\necho custom\n", encoding="utf-8")

    result = install_hooks(tmp_path, force=True)

    assert len(result.backups) == 1
    backup = result.backups[0]
    assert backup.name.startswith(f"{HOOK_NAME}.backup.")
    assert backup.read_text(encoding="utf-8") == "#!/bin/sh\necho custom\n"
    assert is_managed(hook)


def test_managed_hook_is_replaced_without_backup(tmp_path: Path) -> None:
    hooks_dir = _make_repo(tmp_path)
    hook = hooks_dir / HOOK_NAME
    hook.write_text(f"#!/bin/sh\n{MANAGED_MARKER}\nexec old-command\n", encoding="utf-8")

    result = install_hooks(tmp_path)

    assert result.backups == []
    assert hook.read_text(encoding="utf-8") == HOOK_SCRIPT


def test_dry_run_touches_nothing(tmp_path: Path) -> None:
    hooks_dir = _make_repo(tmp_path)
    hook = hooks_dir / HOOK_NAME
    hook.write_text("#!/bin/sh\necho custom\n", encoding="utf-8")

    result = install_hooks(tmp_path, dry_run=True, force=True)

    assert len(result.installed) == 1
    assert len(result.backups) == 1
    assert not result.backups[0].exists()
    assert hook.read_text(encoding="utf-8") == "#!/bin/sh\necho custom\n"


def test_cli_install_hooks_dry_run(tmp_path: Path) -> None:
    hooks_dir = _make_repo(tmp_path)

    result = CliRunner().invoke(app, ["install-hooks", "--root", str(tmp_path), "--dry-run"])

    assert result.exit_code == 0
    assert "Dry run complete" in result.output
    assert not (hooks_dir / HOOK_NAME).exists()


def test_cli_install_hooks_outside_repository(tmp_path: Path) -> None:
    result = CliRunner().invoke(app, ["install-hooks", "--root", str(tmp_path)])

    assert result.exit_code == 1
    assert "Not a git repository" in result.output
