# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Protocol interfaces decoupling the orchestrator from concrete services."""

from __future__ import annotations

from .repository import Repository
from .tools import Analyzer, Fixer

__all__ = ["Analyzer", "Fixer", "Repository"]
