# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and loaders."""

from __future__ import annotations

from .loader import load_config
from .models import (
    ClassifierConfig,
    ExecutionConfig,
    GateConfig,
    PartialStagingPolicy,
    StagingConfig,
    ToolsConfig,
)

__all__ = [
    "ClassifierConfig",
    "ExecutionConfig",
    "GateConfig",
    "PartialStagingPolicy",
    "StagingConfig",
    "ToolsConfig",
    "load_config",
]
