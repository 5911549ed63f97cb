# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Wire concrete services for the CLI facades."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..config.models import GateConfig
from ..core.process import CommandRunner
from ..decision.classifier import Classifier
from ..git.repository import RepositoryOperations
from ..orchestration.orchestrator import FixOrchestrator
from ..tools.analyzer import ToolAnalyzer
from ..tools.fixer import ToolFixer


@dataclass(frozen=True, slots=True)
class GateServices:
    """Bundle of services used by a single CLI invocation."""

    root: Path
    config: GateConfig
    repository: RepositoryOperations
    orchestrator: FixOrchestrator


def build_services(root: Path, config: GateConfig) -> GateServices:
    """Construct the services for ``root`` according to ``config``.

    Args:
        root: Project root commands run in.
        config: Validated configuration.

    Returns:
        GateServices: Repository service and orchestrator sharing one runner.
    """

    execution = config.execution
    runner = CommandRunner(kill_grace=execution.kill_grace)
    repository = RepositoryOperations(runner, root, timeout=execution.command_timeout)
    classifier = Classifier(config.classifier.rule_tiers(), root)
    analyzer = ToolAnalyzer(runner, root, config.tools, execution)
    fixer = ToolFixer(runner, root, classifier, config.tools, execution)
    orchestrator = FixOrchestrator(
        analyzer,
        fixer,
        repository,
        classifier,
        partial_staging=config.staging.partial_staging,
    )
    return GateServices(root=root, config=config, repository=repository, orchestrator=orchestrator)


__all__ = ["GateServices", "build_services"]
