# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helpers for validating paths before they reach a command line."""

from __future__ import annotations

import os
from collections.abc import Iterable
from os import PathLike
from pathlib import Path
from typing import Final

from ..errors import PathValidationError

_Pathish = str | PathLike[str] | Path
_NULL_BYTE: Final[str] = "\0"


def normalize_path(path: _Pathish, cwd: _Pathish | None = None) -> Path:
    """Return ``path`` cleaned and anchored to ``cwd``.

    Embedded null bytes are stripped. Absolute inputs are returned unchanged;
    relative inputs are joined to ``cwd`` and collapsed lexically so ``..``
    segments never survive onto a command line.

    Args:
        path: Filesystem path supplied by the caller.
        cwd: Base directory for relative inputs. Defaults to the process
            working directory.

    Returns:
        Path: Absolute path suitable for use as a command argument.

    Raises:
        PathValidationError: If ``path`` is empty (before or after stripping
            null bytes).

    """

    if path is None:
        raise PathValidationError("File path cannot be empty")
    raw = os.fspath(path)
    cleaned = raw.replace(_NULL_BYTE, "")
    if not cleaned.strip():
        raise PathValidationError("File path cannot be empty")

    candidate = Path(cleaned)
    if candidate.is_absolute():
        return candidate

    base = Path.cwd() if cwd is None else Path(os.fspath(cwd).replace(_NULL_BYTE, ""))
    if not base.is_absolute():
        base = Path.cwd() / base
    return Path(os.path.normpath(base / candidate))


def normalize_paths(paths: Iterable[_Pathish], cwd: _Pathish | None = None) -> list[Path]:
    """Normalise every entry in ``paths`` preserving order.

    Args:
        paths: Paths supplied by the caller.
        cwd: Base directory for relative inputs.

    Returns:
        list[Path]: Normalised absolute paths.

    Raises:
        PathValidationError: If any entry is empty.

    """

    return [normalize_path(path, cwd) for path in paths]


def display_path(path: _Pathish, root: _Pathish | None = None) -> str:
    """Return ``path`` relative to ``root`` when possible for display."""

    base = Path.cwd() if root is None else Path(root)
    candidate = Path(path)
    try:
        return candidate.relative_to(base).as_posix()
    except ValueError:
        return candidate.as_posix()


__all__ = ("display_path", "normalize_path", "normalize_paths")
