# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the quality gate command line facades."""

from __future__ import annotations

import importlib
import json
import logging
from collections.abc import Callable
from pathlib import Path

import pytest
from helpers.fakes import FakeAnalyzer, FakeFixer, FakeRunner, finding, make_result
from typer.testing import CliRunner

from qualitygate.cli import app
from qualitygate.cli.services import GateServices
from qualitygate.cli.shared import ExitCode
from qualitygate.config.models import GateConfig
from qualitygate.context import RunContext
from qualitygate.errors import ToolExecutionError
from qualitygate.git.repository import RepositoryOperations
from qualitygate.models import CheckResult
from qualitygate.orchestration import FixOrchestrator


class CrashingAnalyzer:
    async def check(self, files, context: RunContext) -> CheckResult:
        raise ToolExecutionError(("ruff", "check"), "No such file or directory")


def _install_services(
    monkeypatch: pytest.MonkeyPatch,
    analyzer: object,
    *,
    runner: FakeRunner | None = None,
    fixer: FakeFixer | None = None,
) -> FakeRunner:
    git = runner or FakeRunner()

    def build(root: Path, config: GateConfig) -> GateServices:
        repository = RepositoryOperations(git, root)
        orchestrator = FixOrchestrator(analyzer, fixer or FakeFixer(), repository)
        return GateServices(root=root, config=config, repository=repository, orchestrator=orchestrator)

    # ``qualitygate.cli.app`` resolves to the Typer object re-exported by the package.
    monkeypatch.setattr(importlib.import_module("qualitygate.cli.app"), "build_services", build)
    return git


def _source(root: Path, name: str = "app.py") -> Path:
    path = root / name
    path.write_text("value = 1\n", encoding="utf-8")
    return path


def _invoke(args: list[str], stdin: str | None = None):
    return CliRunner().invoke(app, args, input=stdin)


def _blocking(path: Path) -> CheckResult:
    return CheckResult(success=False, findings=(finding("typecheck", path, rule="arg-type", line=3),))


def test_check_without_files_passes(tmp_path: Path) -> None:
    result = _invoke(["check", "--root", str(tmp_path)])

    assert result.exit_code == ExitCode.PASS
    assert "No files to check" in result.output


def test_check_clean_file_passes(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = _source(tmp_path)
    _install_services(monkeypatch, FakeAnalyzer(CheckResult(success=True)))

    result = _invoke(["check", "--root", str(tmp_path), str(target)])

    assert result.exit_code == ExitCode.PASS
    assert "Quality gate passed" in result.output


def test_check_blocking_findings_exit_one(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = _source(tmp_path)
    _install_services(monkeypatch, FakeAnalyzer(_blocking(target)))

    result = _invoke(["check", "--root", str(tmp_path), "--no-emoji", str(target)])

    assert result.exit_code == ExitCode.BLOCKED
    assert "app.py:3:1 typecheck arg-type typecheck issue" in result.output
    assert "Quality gate blocked: 1 finding(s) need attention" in result.output


def test_check_tool_failure_exit_three(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = _source(tmp_path)
    _install_services(monkeypatch, CrashingAnalyzer())

    result = _invoke(["check", "--root", str(tmp_path), str(target)])

    assert result.exit_code == ExitCode.TOOL_FAILURE
    assert "Quality could not be determined" in result.output


def test_check_fixes_without_staging_by_default(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = _source(tmp_path)
    analyzer = FakeAnalyzer(CheckResult(success=False, findings=(finding("format", target, rule="format"),)))
    runner = _install_services(monkeypatch, analyzer, fixer=FakeFixer(rewrite={target}))

    result = _invoke(["check", "--root", str(tmp_path), str(target)])

    assert result.exit_code == ExitCode.PASS
    assert target.read_text(encoding="utf-8") == "value = 1\n\n"
    assert runner.calls_for("add") == []


def test_check_reports_missing_files(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    analyzer = FakeAnalyzer()
    _install_services(monkeypatch, analyzer)

    result = _invoke(["check", "--root", str(tmp_path), str(tmp_path / "gone.py")])

    assert result.exit_code == ExitCode.PASS
    assert "Skipped gone.py: File does not exist" in result.output
    assert analyzer.calls == []


def test_check_invalid_configuration_exit_three(tmp_path: Path) -> None:
    target = _source(tmp_path)
    (tmp_path / ".quality-gate.toml").write_text("[execution]\nunknown = 1\n", encoding="utf-8")

    result = _invoke(["check", "--root", str(tmp_path), str(target)])

    assert result.exit_code == ExitCode.TOOL_FAILURE
    assert "Invalid quality gate configuration" in result.output


def _staged_responder(root: Path, staged: str) -> Callable[[str, tuple[str, ...]], object]:
    def respond(command: str, args: tuple[str, ...]):
        if args[:2] == ("diff", "--cached") and "--diff-filter=ACM" in args:
            return make_result(stdout=staged)
        if args[:2] == ("rev-parse", "--show-toplevel"):
            return make_result(stdout=str(root))
        return None

    return respond


def test_git_hook_without_staged_files_passes(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    analyzer = FakeAnalyzer()
    _install_services(monkeypatch, analyzer)

    result = _invoke(["git-hook", "--root", str(tmp_path)])

    assert result.exit_code == ExitCode.PASS
    assert "No staged files to check" in result.output
    assert analyzer.calls == []


def test_git_hook_checks_staged_files(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = _source(tmp_path)
    analyzer = FakeAnalyzer(_blocking(target))
    runner = FakeRunner(_staged_responder(tmp_path, "app.py\n"))
    _install_services(monkeypatch, analyzer, runner=runner)

    result = _invoke(["git-hook", "--root", str(tmp_path)])

    assert result.exit_code == ExitCode.BLOCKED
    assert analyzer.calls == [[target]]


def test_git_hook_blocks_when_quality_is_unknown(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = _source(tmp_path)
    _install_services(monkeypatch, CrashingAnalyzer())

    result = _invoke(["git-hook", "--root", str(tmp_path), str(target)])

    assert result.exit_code == ExitCode.BLOCKED
    assert "Quality could not be determined" in result.output


def _agent_payload(tool: str, file_path: str) -> str:
    return json.dumps({"tool_name": tool, "tool_input": {"file_path": file_path, "content": "x"}})


@pytest.mark.parametrize(
    "stdin",
    [
        "not json",
        json.dumps({"tool_name": "Write"}),
        _agent_payload("Read", "app.py"),
        _agent_payload("Write", "README.md"),
        _agent_payload("Write", "\u0000"),
    ],
)
def test_agent_hook_ignores_irrelevant_payloads(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, stdin: str) -> None:
    analyzer = FakeAnalyzer()
    _install_services(monkeypatch, analyzer)

    result = _invoke(["agent-hook", "--root", str(tmp_path)], stdin=stdin)

    assert result.exit_code == ExitCode.PASS
    assert analyzer.calls == []


def test_agent_hook_blocks_agent_on_findings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = _source(tmp_path)
    _install_services(monkeypatch, FakeAnalyzer(_blocking(target)))

    result = _invoke(["agent-hook", "--root", str(tmp_path)], stdin=_agent_payload("Edit", "app.py"))

    assert result.exit_code == ExitCode.AGENT_BLOCKED
    assert "arg-type" in result.output


def test_agent_hook_never_blocks_on_tool_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = _source(tmp_path)
    _install_services(monkeypatch, CrashingAnalyzer())

    result = _invoke(["agent-hook", "--root", str(tmp_path)], stdin=_agent_payload("Write", str(target)))

    assert result.exit_code == ExitCode.PASS
    assert "could not run" in result.output


def test_agent_hook_passes_clean_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = _source(tmp_path)
    analyzer = FakeAnalyzer(CheckResult(success=True))
    _install_services(monkeypatch, analyzer)

    result = _invoke(["agent-hook", "--root", str(tmp_path)], stdin=_agent_payload("MultiEdit", str(target)))

    assert result.exit_code == ExitCode.PASS
    assert analyzer.calls == [[target]]


def test_check_json_output_lists_findings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = _source(tmp_path)
    _install_services(monkeypatch, FakeAnalyzer(_blocking(target)))

    result = _invoke(["check", "--root", str(tmp_path), "--format", "json", str(target)])

    assert result.exit_code == ExitCode.BLOCKED
    payload = json.loads(result.output)
    assert payload["outcome"] == "blocked"
    assert payload["correlation_id"].startswith("qg-")
    [item] = payload["findings"]
    assert (item["file"], item["line"], item["engine"], item["rule_id"]) == ("app.py", 3, "typecheck", "arg-type")


def test_check_json_output_without_files(tmp_path: Path) -> None:
    result = _invoke(["check", "--root", str(tmp_path), "--format", "JSON"])

    assert result.exit_code == ExitCode.PASS
    assert json.loads(result.output)["outcome"] == "success"


def test_check_rejects_unknown_output_format(tmp_path: Path) -> None:
    result = _invoke(["check", "--root", str(tmp_path), "--format", "xml"])

    assert result.exit_code == 2
    assert "Unsupported output format" in result.output


def test_git_hook_json_output_reports_skipped_files(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _install_services(monkeypatch, FakeAnalyzer())

    result = _invoke(["git-hook", "--root", str(tmp_path), "-f", "json", str(tmp_path / "gone.py")])

    assert result.exit_code == ExitCode.PASS
    payload = json.loads(result.output)
    assert payload["outcome"] == "success"
    assert payload["skipped"] == {"gone.py": "File does not exist"}


def test_agent_hook_json_output_blocks_agent(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = _source(tmp_path)
    _install_services(monkeypatch, FakeAnalyzer(_blocking(target)))

    result = _invoke(["agent-hook", "--root", str(tmp_path), "--format", "json"], stdin=_agent_payload("Edit", "app.py"))

    assert result.exit_code == ExitCode.AGENT_BLOCKED
    payload = json.loads(result.output)
    assert payload["outcome"] == "blocked"
    assert payload["findings"][0]["rule_id"] == "arg-type"


def test_debug_flag_attaches_single_handler(tmp_path: Path) -> None:
    logger = logging.getLogger("qualitygate")
    before = list(logger.handlers)
    try:
        for _ in range(2):
            result = _invoke(["--debug", "check", "--root", str(tmp_path)])
            assert result.exit_code == ExitCode.PASS
        added = [handler for handler in logger.handlers if handler not in before]
        assert len(added) == 1
    finally:
        for handler in list(logger.handlers):
            if handler not in before:
                logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
