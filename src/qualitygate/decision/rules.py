# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rule tiers deciding which lint findings may be fixed without review."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath
from typing import Final


class RuleTier(str, Enum):
    """Autofix safety tier of a lint rule."""

    ALWAYS_SAFE = "always_safe"
    CONTEXT_DEPENDENT = "context_dependent"
    NEVER_AUTO = "never_auto"
    UNKNOWN = "unknown"


# Stable rules whose Ruff fixes are marked safe.
ALWAYS_SAFE_RULES: Final[frozenset[str]] = frozenset(
    {
        # whitespace and layout
        "W291",
        "W292",
        "W293",
        "E703",
        "COM812",
        "Q000",
        "Q001",
        "Q002",
        "Q003",
        # import organisation
        "I001",
        "I002",
        "F401",
        "TID252",
        # equivalent modernisation
        "UP004",
        "UP006",
        "UP007",
        "UP008",
        "UP009",
        "UP015",
        "UP025",
        "UP032",
        "UP034",
        "UP035",
        "UP037",
        "UP039",
        "C416",
        # simplification
        "PIE790",
        "PIE794",
        "RET505",
        "RET506",
        "RSE102",
        "SIM103",
        "PLR5501",
    }
)

# Rules that are safe only outside particular files.
CONTEXT_DEPENDENT_RULES: Final[frozenset[str]] = frozenset({"T201", "T203", "T100", "ERA001"})

# Rules requiring human judgement.
NEVER_AUTO_RULES: Final[frozenset[str]] = frozenset(
    {
        "F821",
        "F841",
        "B018",
        "C901",
        "PLR0911",
        "PLR0912",
        "PLR0913",
        "PLR0915",
        "PLR1702",
        "ANN401",
        "BLE001",
        "PGH003",
    }
)

_SECURITY_RULE: Final[re.Pattern[str]] = re.compile(r"^S\d{3}$")
_TEST_DIRECTORIES: Final[frozenset[str]] = frozenset({"tests", "test", "__tests__"})
_TEST_MARKERS: Final[tuple[str, ...]] = (".test.", ".spec.")
_DEV_MARKERS: Final[tuple[str, ...]] = (".dev.", "debug", "development")


def is_test_file(path: PurePath | str) -> bool:
    """Return ``True`` when ``path`` looks like a test module."""

    candidate = PurePath(path)
    name = candidate.name
    if name.startswith("test_") or name.endswith("_test.py") or name == "conftest.py":
        return True
    if any(marker in name for marker in _TEST_MARKERS):
        return True
    return any(part in _TEST_DIRECTORIES for part in candidate.parts[:-1])


def is_dev_file(path: PurePath | str) -> bool:
    """Return ``True`` when ``path`` looks like development-only code."""

    text = PurePath(path).as_posix().lower()
    return any(marker in text for marker in _DEV_MARKERS)


def _print_removal_safe(path: PurePath) -> bool:
    return not (is_test_file(path) or is_dev_file(path))


def _always(_: PurePath) -> bool:
    return True


def _outside_dev_code(path: PurePath) -> bool:
    return not is_dev_file(path)


CONTEXT_CHECKS: Final[dict[str, Callable[[PurePath], bool]]] = {
    "T201": _print_removal_safe,
    "T203": _print_removal_safe,
    "T100": _always,
    "ERA001": _outside_dev_code,
}


@dataclass(frozen=True, slots=True)
class RuleTiers:
    """Rule tier lookup with optional project-specific overrides.

    Attributes:
        extra_safe: Additional rule ids treated as always safe.
        extra_never_auto: Additional rule ids that always require review.
            These win over every other tier.
    """

    extra_safe: frozenset[str] = field(default_factory=frozenset)
    extra_never_auto: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_config(cls, extra_safe: Iterable[str] = (), extra_never_auto: Iterable[str] = ()) -> RuleTiers:
        """Build tiers from configured rule id collections."""

        return cls(
            extra_safe=frozenset(rule.upper() for rule in extra_safe),
            extra_never_auto=frozenset(rule.upper() for rule in extra_never_auto),
        )

    def tier(self, rule_id: str | None) -> RuleTier:
        """Return the tier of ``rule_id``."""

        if not rule_id:
            return RuleTier.UNKNOWN
        rule = rule_id.upper()
        if rule in self.extra_never_auto or rule in NEVER_AUTO_RULES or _SECURITY_RULE.match(rule):
            return RuleTier.NEVER_AUTO
        if rule in self.extra_safe or rule in ALWAYS_SAFE_RULES:
            return RuleTier.ALWAYS_SAFE
        if rule in CONTEXT_DEPENDENT_RULES:
            return RuleTier.CONTEXT_DEPENDENT
        return RuleTier.UNKNOWN

    def is_fixable(self, rule_id: str | None, path: PurePath | str) -> bool:
        """Return ``True`` when a finding for ``rule_id`` in ``path`` may be fixed silently."""

        tier = self.tier(rule_id)
        if tier is RuleTier.ALWAYS_SAFE:
            return True
        if tier is RuleTier.CONTEXT_DEPENDENT and rule_id is not None:
            check = CONTEXT_CHECKS.get(rule_id.upper(), _always)
            return check(PurePath(path))
        return False


DEFAULT_RULE_TIERS: Final[RuleTiers] = RuleTiers()


__all__ = [
    "ALWAYS_SAFE_RULES",
    "CONTEXT_DEPENDENT_RULES",
    "DEFAULT_RULE_TIERS",
    "NEVER_AUTO_RULES",
    "RuleTier",
    "RuleTiers",
    "is_dev_file",
    "is_test_file",
]
