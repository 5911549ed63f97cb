# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing output helpers and diagnostic logging setup."""

from __future__ import annotations

import logging
import sys
from typing import Final

from .console import console_manager

_DEBUG_FORMAT: Final[str] = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_ROOT_LOGGER: Final[str] = "qualitygate"
_HANDLER_MARKER: Final[str] = "_qualitygate_debug_handler"


def emoji(symbol: str, enable: bool) -> str:
    """Return *symbol* when emoji output is enabled, otherwise blank."""

    return symbol if enable else ""


def _emit(msg: str, *, style: str | None, use_color: bool, use_emoji: bool, stderr: bool) -> None:
    console = console_manager().get(color=use_color, emoji=use_emoji, stderr=stderr)
    console.print(msg, style=style, markup=False, highlight=False, emoji=False)


def section(title: str, *, use_color: bool = True, stderr: bool = False) -> None:
    """Print a section header."""

    console = console_manager().get(color=use_color, emoji=False, stderr=stderr)
    console.print()
    console.rule(title, style="blue" if use_color else "")


def info(msg: str, *, use_emoji: bool = True, use_color: bool = True, stderr: bool = False) -> None:
    """Emit an informational message."""

    _emit(f"{emoji('ℹ️ ', use_emoji)}{msg}", style="cyan", use_color=use_color, use_emoji=use_emoji, stderr=stderr)


def ok(msg: str, *, use_emoji: bool = True, use_color: bool = True, stderr: bool = False) -> None:
    """Emit a success message."""

    _emit(f"{emoji('✅ ', use_emoji)}{msg}", style="green", use_color=use_color, use_emoji=use_emoji, stderr=stderr)


def warn(msg: str, *, use_emoji: bool = True, use_color: bool = True, stderr: bool = False) -> None:
    """Emit a warning message."""

    _emit(f"{emoji('⚠️ ', use_emoji)}{msg}", style="yellow", use_color=use_color, use_emoji=use_emoji, stderr=stderr)


def fail(msg: str, *, use_emoji: bool = True, use_color: bool = True, stderr: bool = False) -> None:
    """Emit an error message."""

    _emit(f"{emoji('❌ ', use_emoji)}{msg}", style="red", use_color=use_color, use_emoji=use_emoji, stderr=stderr)


def plain(msg: str, *, stderr: bool = False) -> None:
    """Emit ``msg`` without decoration."""

    _emit(msg, style=None, use_color=False, use_emoji=False, stderr=stderr)


def configure_debug_logging(enabled: bool) -> None:
    """Attach a stderr handler to the package logger when ``enabled``.

    Repeated calls never attach more than one handler.

    Args:
        enabled: ``True`` to emit debug records on standard error.
    """

    logger = logging.getLogger(_ROOT_LOGGER)
    if not enabled:
        logger.setLevel(logging.WARNING)
        return
    logger.setLevel(logging.DEBUG)
    if any(getattr(handler, _HANDLER_MARKER, False) for handler in logger.handlers):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_DEBUG_FORMAT))
    setattr(handler, _HANDLER_MARKER, True)
    logger.addHandler(handler)


__all__ = [
    "configure_debug_logging",
    "emoji",
    "fail",
    "info",
    "ok",
    "plain",
    "section",
    "warn",
]
