# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from qualitygate.config.loader import load_config
from qualitygate.config.models import GateConfig, PartialStagingPolicy, ToolsConfig
from qualitygate.decision.rules import RuleTier
from qualitygate.errors import ConfigError


def _write(path: Path, content: str) -> None:
    path.write_text(dedent(content).lstrip(), encoding="utf-8")


def test_defaults_without_configuration(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config == GateConfig()
    assert config.execution.max_concurrency == 4
    assert config.staging.partial_staging is PartialStagingPolicy.SKIP
    assert config.tools.extensions == (".py", ".pyi")


def test_pyproject_section_is_loaded(tmp_path: Path) -> None:
    _write(
        tmp_path / "pyproject.toml",
        """
        [project]
        name = "demo"

        [tool.quality-gate.execution]
        command_timeout = 12.5
        max_concurrency = 2

        [tool.quality-gate.staging]
        partial_staging = "fail"
        """,
    )

    config = load_config(tmp_path)

    assert config.execution.command_timeout == 12.5
    assert config.execution.max_concurrency == 2
    assert config.staging.partial_staging is PartialStagingPolicy.FAIL


def test_project_file_overrides_pyproject(tmp_path: Path) -> None:
    _write(
        tmp_path / "pyproject.toml",
        """
        [tool.quality-gate.execution]
        command_timeout = 12.5
        max_concurrency = 2
        """,
    )
    _write(
        tmp_path / ".quality-gate.toml",
        """
        [execution]
        max_concurrency = 6

        [classifier]
        extra_safe_rules = ["XYZ1"]
        """,
    )

    config = load_config(tmp_path)

    assert config.execution.command_timeout == 12.5
    assert config.execution.max_concurrency == 6
    assert config.classifier.rule_tiers().tier("XYZ1") is RuleTier.ALWAYS_SAFE


def test_pyproject_without_section_uses_defaults(tmp_path: Path) -> None:
    _write(tmp_path / "pyproject.toml", '[tool.ruff]\nline-length = 100\n')

    assert load_config(tmp_path) == GateConfig()


def test_unknown_keys_are_rejected(tmp_path: Path) -> None:
    _write(tmp_path / ".quality-gate.toml", "[execution]\nparallelism = 3\n")

    with pytest.raises(ConfigError, match="Invalid quality gate configuration"):
        load_config(tmp_path)


def test_invalid_values_are_rejected(tmp_path: Path) -> None:
    _write(tmp_path / ".quality-gate.toml", '[staging]\npartial_staging = "sometimes"\n')

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_toml_is_reported(tmp_path: Path) -> None:
    _write(tmp_path / ".quality-gate.toml", "[execution\n")

    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(tmp_path)


def test_non_table_pyproject_section_is_rejected(tmp_path: Path) -> None:
    _write(tmp_path / "pyproject.toml", '[tool]\nquality-gate = "on"\n')

    with pytest.raises(ConfigError, match="must be a table"):
        load_config(tmp_path)


def test_extensions_are_normalised() -> None:
    tools = ToolsConfig(extensions=("PY", " .pyi ", ""))

    assert tools.extensions == (".py", ".pyi")
