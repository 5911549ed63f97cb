# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Fix orchestration state machine."""

from __future__ import annotations

from .orchestrator import FixOptions, FixOrchestrator

__all__ = ["FixOptions", "FixOrchestrator"]
