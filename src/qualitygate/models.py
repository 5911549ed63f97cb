# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the quality gate package."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .core.paths import display_path


class Engine(str, Enum):
    """Analyzer family that produced a finding."""

    FORMAT = "format"
    LINT = "lint"
    TYPECHECK = "typecheck"


class FindingSeverity(str, Enum):
    """Severity levels reported by analyzers."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class DecisionAction(str, Enum):
    """Actions the classifier can choose for a set of findings."""

    FIX_SILENTLY = "FIX_SILENTLY"
    CONTINUE = "CONTINUE"
    REPORT_ONLY = "REPORT_ONLY"
    FIX_AND_REPORT = "FIX_AND_REPORT"


class FixApplicability(str, Enum):
    """Safety of the automatic fix an analyzer offers for a finding."""

    SAFE = "safe"
    UNSAFE = "unsafe"
    DISPLAY_ONLY = "display-only"
    UNAVAILABLE = "unavailable"


class OrchestrationOutcome(str, Enum):
    """Caller-facing verdict of an orchestration run."""

    SUCCESS = "success"
    BLOCKED = "blocked"
    FAILED = "failed"


class OrchestratorState(str, Enum):
    """States visited by the fix orchestrator."""

    CHECKING = "CHECKING"
    DECIDING = "DECIDING"
    FIXING = "FIXING"
    RECHECKING = "RECHECKING"
    STAGING = "STAGING"
    DONE = "DONE"
    FAILED = "FAILED"


class Finding(BaseModel):
    """Normalized issue reported by an analyzer."""

    model_config = ConfigDict(frozen=True)

    engine: Engine
    severity: FindingSeverity = FindingSeverity.ERROR
    rule_id: str | None = None
    file: Path
    line: int = Field(default=1, ge=0)
    col: int = Field(default=1, ge=0)
    end_line: int | None = None
    end_col: int | None = None
    message: str
    suggestion: str | None = None
    # ``None`` when the analyzer does not report fix availability.
    fix_applicability: FixApplicability | None = None

    def sort_key(self) -> tuple[str, int, int, str, str, str]:
        """Return the canonical ordering key for the finding."""

        return (
            self.file.as_posix(),
            self.line,
            self.col,
            self.engine.value,
            self.rule_id or "",
            self.message,
        )

    def render(self, root: Path | None = None) -> str:
        """Return the finding as a single ``file:line:col engine rule message`` line."""

        rule = self.rule_id or "-"
        location = f"{display_path(self.file, root)}:{self.line}:{self.col}"
        return f"{location} {self.engine.value} {rule} {self.message}"


class Decision(BaseModel):
    """Classifier verdict for a sequence of findings."""

    model_config = ConfigDict(frozen=True)

    action: DecisionAction
    confidence: float = Field(ge=0.0, le=1.0)
    fixable_findings: tuple[Finding, ...] = ()
    unfixable_findings: tuple[Finding, ...] = ()

    @property
    def findings(self) -> tuple[Finding, ...]:
        """Return every classified finding, fixable first."""

        return self.fixable_findings + self.unfixable_findings


class CheckResult(BaseModel):
    """Outcome of an analyzer pass."""

    model_config = ConfigDict(frozen=True)

    success: bool
    findings: tuple[Finding, ...] = ()


class FixOutcome(BaseModel):
    """Outcome reported by a fixer for a single file."""

    model_config = ConfigDict(frozen=True)

    success: bool
    modified_files: frozenset[Path] = frozenset()


class OrchestrationResult(BaseModel):
    """Report returned by :class:`FixOrchestrator` to facades."""

    model_config = ConfigDict(frozen=True)

    outcome: OrchestrationOutcome
    findings: tuple[Finding, ...] = ()
    staged_files: frozenset[Path] = frozenset()
    decision: Decision | None = None
    skipped: dict[Path, str] = Field(default_factory=dict)
    state: OrchestratorState = OrchestratorState.DONE
    transitions: tuple[OrchestratorState, ...] = ()
    error: str | None = None
    correlation_id: str | None = None

    @property
    def passed(self) -> bool:
        """Return ``True`` when the outcome is a success."""

        return self.outcome is OrchestrationOutcome.SUCCESS


__all__ = [
    "CheckResult",
    "Decision",
    "DecisionAction",
    "Engine",
    "Finding",
    "FindingSeverity",
    "FixApplicability",
    "FixOutcome",
    "OrchestrationOutcome",
    "OrchestrationResult",
    "OrchestratorState",
]
