# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Classify findings into a single orchestration decision."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path, PurePath
from typing import Final

from ..models import Decision, DecisionAction, Engine, Finding, FindingSeverity, FixApplicability
from .rules import DEFAULT_RULE_TIERS, RuleTiers

CONFIDENCE_CERTAIN: Final[float] = 1.0
CONFIDENCE_MIXED: Final[float] = 0.8
CONFIDENCE_NON_BLOCKING: Final[float] = 0.9

_NON_BLOCKING: Final[frozenset[FindingSeverity]] = frozenset({FindingSeverity.INFO})


class Classifier:
    """Map a sequence of findings to a :class:`Decision`.

    The classifier is total: every input, including an empty one, yields a
    decision. Findings are ordered canonically before partitioning so that
    value-equal inputs always produce identical decisions.
    """

    def __init__(self, tiers: RuleTiers = DEFAULT_RULE_TIERS, root: Path | None = None) -> None:
        """Initialise the classifier.

        Args:
            tiers: Lint rule tiers.
            root: Project root; file context checks only look at the part of
                a finding's path below it.
        """

        self.tiers = tiers
        self.root = root

    def project_path(self, file: Path) -> PurePath:
        """Return ``file`` relative to :attr:`root` when it lies below it."""

        if self.root is None:
            return file
        try:
            return file.relative_to(self.root)
        except ValueError:
            return file

    def is_fixable(self, finding: Finding) -> bool:
        """Return ``True`` when ``finding`` may be fixed without review."""

        if finding.engine is Engine.FORMAT:
            return True
        if finding.engine is Engine.TYPECHECK:
            return False
        if finding.fix_applicability not in {None, FixApplicability.SAFE}:
            return False
        return self.tiers.is_fixable(finding.rule_id, self.project_path(finding.file))

    def classify(self, findings: Iterable[Finding]) -> Decision:
        """Return the decision for ``findings``.

        Args:
            findings: Findings reported by the analyzers.

        Returns:
            Decision: Chosen action with the fixable/unfixable partition.
        """

        ordered = sorted(set(findings), key=Finding.sort_key)
        fixable = tuple(finding for finding in ordered if self.is_fixable(finding))
        unfixable = tuple(finding for finding in ordered if not self.is_fixable(finding))

        if not fixable and not unfixable:
            action, confidence = DecisionAction.CONTINUE, CONFIDENCE_CERTAIN
        elif fixable and not unfixable:
            action, confidence = DecisionAction.FIX_SILENTLY, CONFIDENCE_CERTAIN
        elif fixable:
            action, confidence = DecisionAction.FIX_AND_REPORT, CONFIDENCE_MIXED
        elif all(finding.severity in _NON_BLOCKING for finding in unfixable):
            action, confidence = DecisionAction.CONTINUE, CONFIDENCE_NON_BLOCKING
        else:
            action, confidence = DecisionAction.REPORT_ONLY, CONFIDENCE_CERTAIN

        return Decision(
            action=action,
            confidence=confidence,
            fixable_findings=fixable,
            unfixable_findings=unfixable,
        )


def classify(findings: Iterable[Finding], tiers: RuleTiers = DEFAULT_RULE_TIERS) -> Decision:
    """Classify ``findings`` with a one-off :class:`Classifier`."""

    return Classifier(tiers).classify(findings)


__all__ = ["Classifier", "classify"]
