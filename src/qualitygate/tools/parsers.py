# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parsers translating Python analyzer output into :class:`Finding` objects."""

from __future__ import annotations

import json
import re
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any, Final

from ..core.paths import normalize_path
from ..models import Engine, Finding, FindingSeverity, FixApplicability

RUFF_FORMAT_MESSAGE: Final[str] = "File would be reformatted"
RUFF_FORMAT_RULE: Final[str] = "unformatted"
_RUFF_NOTICE_CODES: Final[re.Pattern[str]] = re.compile(r"^(D|N)\d{3,4}")
_MYPY_SEVERITY: Final[dict[str, FindingSeverity]] = {
    "error": FindingSeverity.ERROR,
    "warning": FindingSeverity.WARNING,
    "note": FindingSeverity.INFO,
}


def _resolve(raw: str, root: Path) -> Path:
    return normalize_path(raw, root)


def _as_int(value: Any, default: int = 1) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return value


def _ruff_severity(code: str | None) -> FindingSeverity:
    if not code:
        return FindingSeverity.WARNING
    if _RUFF_NOTICE_CODES.match(code):
        return FindingSeverity.INFO
    if code[0] in {"E", "F"}:
        return FindingSeverity.ERROR
    return FindingSeverity.WARNING


def _iter_json_objects(payload: str) -> Iterator[Mapping[str, Any]]:
    """Yield JSON objects from a document or a JSON-lines stream."""

    text = payload.strip()
    if not text:
        return
    try:
        document = json.loads(text)
    except json.JSONDecodeError:
        document = [json.loads(line) for line in text.splitlines() if line.strip()]
    items = document if isinstance(document, list) else [document]
    for item in items:
        if isinstance(item, Mapping):
            yield item


def _ruff_applicability(fix: Any) -> FixApplicability:
    if not isinstance(fix, Mapping):
        return FixApplicability.UNAVAILABLE
    try:
        return FixApplicability(str(fix.get("applicability", "")).lower())
    except ValueError:
        return FixApplicability.UNSAFE


def parse_ruff_check(payload: str, root: Path) -> list[Finding]:
    """Parse ``ruff check --output-format json`` output.

    Args:
        payload: Standard output produced by Ruff.
        root: Directory Ruff ran in, used to anchor relative file names.

    Returns:
        list[Finding]: Lint findings carrying the applicability of Ruff's fix.

    Raises:
        ValueError: If the payload is not valid JSON.
    """

    findings: list[Finding] = []
    for item in _iter_json_objects(payload):
        filename = item.get("filename")
        if not isinstance(filename, str):
            continue
        code = item.get("code") if isinstance(item.get("code"), str) else None
        location = item.get("location") or {}
        end_location = item.get("end_location") or {}
        fix = item.get("fix")
        findings.append(
            Finding(
                engine=Engine.LINT,
                severity=_ruff_severity(code),
                rule_id=code,
                file=_resolve(filename, root),
                line=_as_int(location.get("row")),
                col=_as_int(location.get("column")),
                end_line=_as_int(end_location.get("row"), 0) or None,
                end_col=_as_int(end_location.get("column"), 0) or None,
                message=str(item.get("message") or ""),
                suggestion=fix.get("message") if isinstance(fix, Mapping) else None,
                fix_applicability=_ruff_applicability(fix),
            )
        )
    return findings


def parse_ruff_format(payload: str, root: Path) -> list[Finding]:
    """Parse ``ruff format --check --output-format json`` output.

    Ruff may report several hunks for one file; one finding per file is
    kept, located at the first hunk.

    Raises:
        ValueError: If the payload is not valid JSON.
    """

    findings: dict[Path, Finding] = {}
    for item in _iter_json_objects(payload):
        filename = item.get("filename")
        if not isinstance(filename, str):
            continue
        path = _resolve(filename, root)
        if path in findings:
            continue
        location = item.get("location") or {}
        code = item.get("code")
        findings[path] = Finding(
            engine=Engine.FORMAT,
            severity=FindingSeverity.WARNING,
            rule_id=code if isinstance(code, str) and code else RUFF_FORMAT_RULE,
            file=path,
            line=_as_int(location.get("row")),
            col=_as_int(location.get("column")),
            message=str(item.get("message") or RUFF_FORMAT_MESSAGE),
            suggestion="Run `ruff format`",
        )
    return list(findings.values())


def parse_mypy(payload: str, root: Path) -> list[Finding]:
    """Parse ``mypy --output json`` diagnostics.

    MyPy reports zero-based columns; findings carry one-based columns.

    Raises:
        ValueError: If a line is not valid JSON.
    """

    findings: list[Finding] = []
    for item in _iter_json_objects(payload):
        path = item.get("file") or item.get("path")
        if not isinstance(path, str):
            continue
        severity = _MYPY_SEVERITY.get(str(item.get("severity", "error")).lower(), FindingSeverity.WARNING)
        column = _as_int(item.get("column"), -1)
        hint = item.get("hint")
        findings.append(
            Finding(
                engine=Engine.TYPECHECK,
                severity=severity,
                rule_id=item.get("code") if isinstance(item.get("code"), str) else None,
                file=_resolve(path, root),
                line=max(_as_int(item.get("line")), 0),
                col=column + 1 if column >= 0 else 1,
                message=str(item.get("message") or ""),
                suggestion=hint if isinstance(hint, str) else None,
            )
        )
    return findings


__all__ = ["RUFF_FORMAT_MESSAGE", "RUFF_FORMAT_RULE", "parse_mypy", "parse_ruff_check", "parse_ruff_format"]
