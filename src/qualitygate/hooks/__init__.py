# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Git hook installation helpers."""

from __future__ import annotations

from .installer import HOOK_NAME, HOOK_SCRIPT, MANAGED_MARKER, InstallResult, install_hooks, is_managed

__all__ = ["HOOK_NAME", "HOOK_SCRIPT", "MANAGED_MARKER", "InstallResult", "install_hooks", "is_managed"]
