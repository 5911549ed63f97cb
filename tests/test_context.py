# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for run contexts and correlated logging."""

from __future__ import annotations

import logging
import re

import pytest

from qualitygate.context import RunContext, ensure_context


def test_create_generates_prefixed_ids() -> None:
    first = RunContext.create("check")
    second = RunContext.create("check")

    assert re.fullmatch(r"qg-[0-9a-f]{8}", first.correlation_id)
    assert first.correlation_id != second.correlation_id
    assert first.label == "check"


def test_logger_prefixes_correlation_id(caplog: pytest.LogCaptureFixture) -> None:
    context = RunContext(correlation_id="qg-12345678", label="unit")
    caplog.set_level(logging.DEBUG, logger="qualitygate")

    context.logger.debug("Staging %d file(s)", 2)

    (record,) = [item for item in caplog.records if item.name == "qualitygate.unit"]
    assert record.getMessage() == "[qg-12345678] Staging 2 file(s)"
    assert record.correlation_id == "qg-12345678"


def test_ensure_context_reuses_existing() -> None:
    context = RunContext.create()

    assert ensure_context(context) is context
    assert ensure_context(None, "detached").label == "detached"
