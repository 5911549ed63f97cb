# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Concrete analyzer and fixer collaborators for Python projects."""

from __future__ import annotations

from .analyzer import ToolAnalyzer
from .fixer import ToolFixer
from .parsers import parse_mypy, parse_ruff_check, parse_ruff_format

__all__ = ["ToolAnalyzer", "ToolFixer", "parse_mypy", "parse_ruff_check", "parse_ruff_format"]
