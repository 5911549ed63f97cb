# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for the quality gate."""

from __future__ import annotations

from enum import Enum
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.process import DEFAULT_KILL_GRACE, DEFAULT_TIMEOUT
from ..decision.rules import RuleTiers

DEFAULT_MAX_CONCURRENCY: Final[int] = 4
DEFAULT_EXTENSIONS: Final[tuple[str, ...]] = (".py", ".pyi")


class PartialStagingPolicy(str, Enum):
    """Action taken when a fixed file was partially staged before the fix."""

    SKIP = "skip"
    STAGE = "stage"
    FAIL = "fail"


class ExecutionConfig(BaseModel):
    """Timeouts and concurrency limits for external commands."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    command_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    kill_grace: float = Field(default=DEFAULT_KILL_GRACE, ge=0)
    max_concurrency: int = Field(default=DEFAULT_MAX_CONCURRENCY, ge=1)


class ClassifierConfig(BaseModel):
    """Project-specific adjustments to the lint rule tiers."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    extra_safe_rules: tuple[str, ...] = ()
    extra_never_auto_rules: tuple[str, ...] = ()

    def rule_tiers(self) -> RuleTiers:
        """Return the rule tiers described by this section."""

        return RuleTiers.from_config(self.extra_safe_rules, self.extra_never_auto_rules)


class StagingConfig(BaseModel):
    """Staging behaviour after a fix pass."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    partial_staging: PartialStagingPolicy = PartialStagingPolicy.SKIP


class ToolsConfig(BaseModel):
    """Analyzer and fixer command settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ruff: bool = True
    ruff_executable: str = "ruff"
    mypy: bool = True
    mypy_executable: str = "mypy"
    mypy_args: tuple[str, ...] = ()
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS

    @field_validator("extensions")
    @classmethod
    def _normalise_extensions(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(ext if ext.startswith(".") else f".{ext}" for ext in (item.strip().lower() for item in value) if ext)


class GateConfig(BaseModel):
    """Top-level quality gate configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    staging: StagingConfig = Field(default_factory=StagingConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)


__all__ = [
    "ClassifierConfig",
    "ExecutionConfig",
    "GateConfig",
    "PartialStagingPolicy",
    "StagingConfig",
    "ToolsConfig",
]
