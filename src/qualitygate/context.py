# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Per-invocation context threaded through every service call."""

from __future__ import annotations

import logging
import uuid
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from typing import Any, Final

CORRELATION_PREFIX: Final[str] = "qg"
_ROOT_LOGGER_NAME: Final[str] = "qualitygate"


class CorrelationLogAdapter(logging.LoggerAdapter):
    """Prefix log records with the correlation id of the active run."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        """Return ``msg`` prefixed with the correlation id.

        Args:
            msg: Log message supplied by the caller.
            kwargs: Keyword arguments forwarded to the logger.

        Returns:
            tuple[Any, MutableMapping[str, Any]]: Prefixed message and kwargs.
        """

        correlation_id = (self.extra or {}).get("correlation_id", "-")
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("correlation_id", correlation_id)
        kwargs["extra"] = extra
        return f"[{correlation_id}] {msg}", kwargs


@dataclass(frozen=True, slots=True)
class RunContext:
    """Carry correlation metadata for a single orchestration.

    Attributes:
        correlation_id: Identifier attached to every log record of the run.
        label: Short description of the run (``"git-hook"``, ``"check"``...).
        logger: Adapter that prefixes records with ``correlation_id``.
    """

    correlation_id: str
    label: str = "run"
    logger: CorrelationLogAdapter = field(repr=False, compare=False, default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.logger is None:
            base = logging.getLogger(f"{_ROOT_LOGGER_NAME}.{self.label}")
            adapter = CorrelationLogAdapter(base, {"correlation_id": self.correlation_id})
            object.__setattr__(self, "logger", adapter)

    @classmethod
    def create(cls, label: str = "run") -> RunContext:
        """Return a context with a freshly generated correlation id.

        Args:
            label: Short description of the run.

        Returns:
            RunContext: New context instance.
        """

        return cls(correlation_id=f"{CORRELATION_PREFIX}-{uuid.uuid4().hex[:8]}", label=label)


def ensure_context(context: RunContext | None, label: str = "run") -> RunContext:
    """Return ``context`` or a new detached context when ``None``."""

    return context if context is not None else RunContext.create(label)


__all__ = ["CorrelationLogAdapter", "RunContext", "ensure_context"]
