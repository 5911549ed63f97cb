# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest
from helpers.fakes import FakeRunner

from qualitygate.context import RunContext
from qualitygate.git.repository import RepositoryOperations


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def repository(tmp_path: Path, fake_runner: FakeRunner, sleeps: list[float]) -> RepositoryOperations:
    async def record_sleep(delay: float) -> None:
        sleeps.append(delay)

    return RepositoryOperations(fake_runner, tmp_path, sleep=record_sleep)


@pytest.fixture
def context() -> RunContext:
    return RunContext.create("test")


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Return an initialised git repository, skipping when git is unavailable."""

    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    root = tmp_path / "repo"
    root.mkdir()
    for args in (
        ["init", "-q"],
        ["config", "user.email", "dev@example.com"],
        ["config", "user.name", "Dev"],
        ["config", "commit.gpgsign", "false"],
    ):
        subprocess.run(["git", *args], cwd=root, check=True, capture_output=True)
    return root
