# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Decision engine mapping findings to orchestration actions."""

from __future__ import annotations

from .classifier import Classifier, classify
from .rules import RuleTier, RuleTiers, is_dev_file, is_test_file

__all__ = ["Classifier", "RuleTier", "RuleTiers", "classify", "is_dev_file", "is_test_file"]
