# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""State machine sequencing check, decide, fix, recheck and stage."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from ..config.models import PartialStagingPolicy
from ..context import RunContext, ensure_context
from ..decision.classifier import Classifier
from ..errors import PathValidationError, StagingError, StagingErrorKind, ToolExecutionError
from ..git.repository import REASON_IGNORED
from ..interfaces.repository import Repository
from ..interfaces.tools import Analyzer, Fixer
from ..models import (
    CheckResult,
    Decision,
    DecisionAction,
    Finding,
    OrchestrationOutcome,
    OrchestrationResult,
    OrchestratorState,
)

REASON_PARTIAL_STAGING: Final[str] = "File was partially staged before the fix; review and stage it manually"


@dataclass(frozen=True, slots=True)
class FixOptions:
    """Caller preferences for a single orchestration.

    Attributes:
        attempt_fix: Run the fixer when the decision allows it.
        stage: Add files modified by the fix pass to the index.
    """

    attempt_fix: bool = True
    stage: bool = True


@dataclass(slots=True)
class _RunState:
    """Mutable bookkeeping owned by one orchestration."""

    context: RunContext
    transitions: list[OrchestratorState] = field(default_factory=list)
    findings: tuple[Finding, ...] = ()
    decision: Decision | None = None
    skipped: dict[Path, str] = field(default_factory=dict)
    staged: frozenset[Path] = frozenset()

    def enter(self, state: OrchestratorState) -> None:
        self.transitions.append(state)
        self.context.logger.debug("Entering state %s", state.value)

    def finish(self, outcome: OrchestrationOutcome, *, error: str | None = None) -> OrchestrationResult:
        terminal = OrchestratorState.FAILED if outcome is OrchestrationOutcome.FAILED else OrchestratorState.DONE
        self.enter(terminal)
        return OrchestrationResult(
            outcome=outcome,
            findings=tuple(sorted(self.findings, key=Finding.sort_key)),
            staged_files=self.staged,
            decision=self.decision,
            skipped=dict(self.skipped),
            state=terminal,
            transitions=tuple(self.transitions),
            error=error,
            correlation_id=self.context.correlation_id,
        )


class FixOrchestrator:
    """Drive a single quality gate run over a list of files.

    Each run is strictly sequential: check, decide, then optionally fix,
    recheck and stage. The set of staged files is always exactly the set
    whose content changed during the fix pass.
    """

    def __init__(
        self,
        analyzer: Analyzer,
        fixer: Fixer,
        repository: Repository,
        classifier: Classifier | None = None,
        *,
        partial_staging: PartialStagingPolicy = PartialStagingPolicy.SKIP,
    ) -> None:
        """Initialise the orchestrator with its collaborators.

        Args:
            analyzer: Collaborator producing findings.
            fixer: Collaborator applying automatic fixes.
            repository: Repository service used for snapshots and staging.
            classifier: Decision engine; defaults to the built-in rule tiers.
            partial_staging: Policy for fixed files that were partially staged.
        """

        self.analyzer = analyzer
        self.fixer = fixer
        self.repository = repository
        self.classifier = classifier or Classifier()
        self.partial_staging = partial_staging

    async def orchestrate(
        self,
        files: Iterable[Path | str],
        options: FixOptions | None = None,
        *,
        context: RunContext | None = None,
    ) -> OrchestrationResult:
        """Run the quality gate over ``files``.

        Args:
            files: Files requested by the caller.
            options: Fix and staging preferences.
            context: Run context; a new one is created when omitted.

        Returns:
            OrchestrationResult: ``success`` and ``blocked`` describe code
            quality; ``failed`` means quality could not be determined or the
            fix could not be staged.
        """

        run = _RunState(ensure_context(context, "orchestrate"))
        resolved = options or FixOptions()
        try:
            return await self._run(list(files), resolved, run)
        except (ToolExecutionError, StagingError, PathValidationError) as exc:
            run.context.logger.error("Orchestration failed: %s", exc)
            return run.finish(OrchestrationOutcome.FAILED, error=str(exc))

    async def _run(self, files: list[Path | str], options: FixOptions, run: _RunState) -> OrchestrationResult:
        ctx = run.context
        report = self.repository.handle_edge_cases(files)
        run.skipped.update(report.reasons)
        for path, reason in report.reasons.items():
            ctx.logger.info("Skipping %s: %s", path, reason)
        readable = list(report.readable)
        if readable:
            ignored = await self.repository.ignored_files(readable, ctx)
            for path in ignored:
                run.skipped[path] = REASON_IGNORED
            readable = [path for path in readable if path not in ignored]
        if not readable:
            return run.finish(OrchestrationOutcome.SUCCESS)

        run.enter(OrchestratorState.CHECKING)
        check = await self.analyzer.check(readable, ctx)
        run.findings = check.findings

        run.enter(OrchestratorState.DECIDING)
        decision = self.classifier.classify(check.findings)
        run.decision = decision
        ctx.logger.debug(
            "Decision %s confidence=%.2f fixable=%d unfixable=%d",
            decision.action.value,
            decision.confidence,
            len(decision.fixable_findings),
            len(decision.unfixable_findings),
        )

        if decision.action is DecisionAction.CONTINUE:
            return run.finish(OrchestrationOutcome.SUCCESS)
        if decision.action is DecisionAction.REPORT_ONLY:
            return run.finish(OrchestrationOutcome.BLOCKED)
        if not await self._fixing_allowed(options, ctx):
            return run.finish(OrchestrationOutcome.BLOCKED)
        return await self._fix(readable, check, decision, options, run)

    async def _fixing_allowed(self, options: FixOptions, ctx: RunContext) -> bool:
        if not options.attempt_fix:
            return False
        state = await self.repository.get_repository_state(ctx)
        if state.has_conflicts:
            ctx.logger.warning("Repository has unresolved conflicts; not fixing or staging")
            return False
        return True

    async def _fix(
        self,
        readable: Sequence[Path],
        check: CheckResult,
        decision: Decision,
        options: FixOptions,
        run: _RunState,
    ) -> OrchestrationResult:
        ctx = run.context
        candidates = set(readable)
        targets = sorted({finding.file for finding in decision.fixable_findings} & candidates)
        partially_staged = await self._partially_staged(targets, options, ctx)
        snapshot = await self.repository.capture_file_states(readable)

        run.enter(OrchestratorState.FIXING)
        for target in targets:
            outcome = await self.fixer.fix(target, check, ctx)
            if not outcome.success:
                ctx.logger.warning("Fixer reported failure for %s; relying on recheck", target)

        run.enter(OrchestratorState.RECHECKING)
        recheck = await self.analyzer.check(list(readable), ctx)
        run.findings = recheck.findings
        modification = await self.repository.detect_modified_files(snapshot)
        for error in modification.errors:
            ctx.logger.warning(error)

        held_back = False
        if options.stage and modification.modified_files:
            to_stage = self._apply_partial_policy(modification.modified_files, partially_staged, run)
            held_back = len(to_stage) < len(modification.modified_files)
            if to_stage:
                run.enter(OrchestratorState.STAGING)
                result = (await self.repository.stage(to_stage, ctx)).raise_for_error()
                run.staged = result.staged_files

        remaining = self.classifier.classify(recheck.findings)
        if remaining.action is DecisionAction.CONTINUE and not held_back:
            return run.finish(OrchestrationOutcome.SUCCESS)
        return run.finish(OrchestrationOutcome.BLOCKED)

    async def _partially_staged(self, targets: Sequence[Path], options: FixOptions, ctx: RunContext) -> set[Path]:
        if not options.stage or self.partial_staging is PartialStagingPolicy.STAGE:
            return set()
        return {target for target in targets if await self.repository.has_partial_staging(target, ctx)}

    def _apply_partial_policy(
        self,
        modified: Sequence[Path],
        partially_staged: set[Path],
        run: _RunState,
    ) -> list[Path]:
        conflicting = [path for path in modified if path in partially_staged]
        if not conflicting:
            return list(modified)
        if self.partial_staging is PartialStagingPolicy.FAIL:
            names = ", ".join(str(path) for path in conflicting)
            raise StagingError(
                f"Refusing to stage partially staged file(s): {names}",
                kind=StagingErrorKind.PARTIAL_STAGING,
            )
        for path in conflicting:
            run.skipped[path] = REASON_PARTIAL_STAGING
            run.context.logger.warning("Not staging partially staged file %s", path)
        return [path for path in modified if path not in partially_staged]


__all__ = ["REASON_PARTIAL_STAGING", "FixOptions", "FixOrchestrator"]
