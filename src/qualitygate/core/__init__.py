# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Process execution, path validation and concurrency primitives."""

from __future__ import annotations

from .concurrency import BoundedExecutor, ExecutorStats
from .paths import display_path, normalize_path, normalize_paths
from .process import CommandOptions, CommandResult, CommandRunner, build_argv

__all__ = [
    "BoundedExecutor",
    "CommandOptions",
    "CommandResult",
    "CommandRunner",
    "ExecutorStats",
    "build_argv",
    "display_path",
    "normalize_path",
    "normalize_paths",
]
