# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring the quality gate facades."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import typer

from ..config.loader import load_config
from ..context import RunContext
from ..core.paths import display_path, normalize_path
from ..errors import ConfigError, PathValidationError, QualityGateError
from ..hooks.installer import install_hooks
from ..logging import configure_debug_logging
from ..models import OrchestrationOutcome, OrchestrationResult
from ..orchestration.orchestrator import FixOptions
from .agent import parse_agent_payload
from .services import GateServices, build_services
from .shared import (
    JSON_FORMAT,
    TEXT_FORMAT,
    CLIError,
    CLILogger,
    ExitCode,
    build_cli_logger,
    render_result_json,
    resolve_output_format,
)

LOGGER = logging.getLogger(__name__)

app = typer.Typer(
    name="quality-gate",
    help="Check, auto-fix and stage code before it reaches the repository.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main_callback(
    debug: bool = typer.Option(False, "--debug", help="Emit diagnostic logging on stderr."),
) -> None:
    """Configure process-wide options shared by every command."""

    configure_debug_logging(debug)


def _resolve_root(root: Path | None) -> Path:
    return (root or Path.cwd()).resolve()


def _load_services(root: Path, *, exit_code: int) -> GateServices:
    """Return services for ``root`` or raise :class:`CLIError` on bad configuration."""

    try:
        config = load_config(root)
    except ConfigError as exc:
        raise CLIError(str(exc), exit_code=exit_code) from exc
    return build_services(root, config)


def _report(result: OrchestrationResult, logger: CLILogger, root: Path, output_format: str = TEXT_FORMAT) -> None:
    """Render ``result`` in ``output_format``."""

    if output_format == JSON_FORMAT:
        logger.echo(render_result_json(result, root))
        return

    for path, reason in result.skipped.items():
        logger.warn(f"Skipped {display_path(path, root)}: {reason}")
    if result.outcome is OrchestrationOutcome.FAILED:
        logger.fail(f"Quality could not be determined: {result.error}")
        return
    if result.staged_files:
        logger.info(f"Staged {len(result.staged_files)} fixed file(s)")
    if result.findings:
        logger.section("Findings")
        logger.findings(result.findings, root)
    if result.outcome is OrchestrationOutcome.SUCCESS:
        logger.ok("Quality gate passed")
    else:
        logger.fail(f"Quality gate blocked: {len(result.findings)} finding(s) need attention")


def _emit_status(
    logger: CLILogger,
    root: Path,
    output_format: str,
    outcome: OrchestrationOutcome,
    message: str,
) -> None:
    """Write a status that has no orchestration result behind it."""

    if output_format == JSON_FORMAT:
        error = message if outcome is OrchestrationOutcome.FAILED else None
        logger.echo(render_result_json(OrchestrationResult(outcome=outcome, error=error), root))
    elif outcome is OrchestrationOutcome.SUCCESS:
        logger.ok(message)
    else:
        logger.fail(message)


@app.command("check")
def check_command(
    files: list[Path] | None = typer.Argument(None, help="Files to check."),
    fix: bool = typer.Option(True, "--fix/--no-fix", help="Apply safe automatic fixes."),
    stage: bool = typer.Option(False, "--stage/--no-stage", help="Stage files changed by fixes."),
    root: Path | None = typer.Option(None, "--root", "-r", help="Project root (defaults to cwd)."),
    emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Toggle emoji output."),
    output_format: str = typer.Option(
        TEXT_FORMAT,
        "--format",
        "-f",
        case_sensitive=False,
        help="Output format: text (default) or json.",
    ),
) -> None:
    """Check files and exit 0 (pass), 1 (blocked) or 3 (tool failure)."""

    output_format = resolve_output_format(output_format)
    logger = build_cli_logger(emoji=emoji)
    root_path = _resolve_root(root)
    if not files:
        _emit_status(logger, root_path, output_format, OrchestrationOutcome.SUCCESS, "No files to check")
        raise typer.Exit(code=ExitCode.PASS)
    try:
        services = _load_services(root_path, exit_code=ExitCode.TOOL_FAILURE)
    except CLIError as exc:
        _emit_status(logger, root_path, output_format, OrchestrationOutcome.FAILED, str(exc))
        raise typer.Exit(code=exc.exit_code) from exc

    context = RunContext.create("check")
    options = FixOptions(attempt_fix=fix, stage=stage)
    result = asyncio.run(services.orchestrator.orchestrate(files, options, context=context))
    _report(result, logger, root_path, output_format)
    exit_code = {
        OrchestrationOutcome.SUCCESS: ExitCode.PASS,
        OrchestrationOutcome.BLOCKED: ExitCode.BLOCKED,
        OrchestrationOutcome.FAILED: ExitCode.TOOL_FAILURE,
    }[result.outcome]
    raise typer.Exit(code=exit_code)


@app.command("git-hook")
def git_hook_command(
    files: list[Path] | None = typer.Argument(None, help="Files to check (defaults to staged files)."),
    root: Path | None = typer.Option(None, "--root", "-r", help="Repository root (defaults to cwd)."),
    emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Toggle emoji output."),
    output_format: str = typer.Option(
        TEXT_FORMAT,
        "--format",
        "-f",
        case_sensitive=False,
        help="Output format: text (default) or json.",
    ),
) -> None:
    """Pre-commit facade: exit 0 to allow the commit, 1 to stop it."""

    output_format = resolve_output_format(output_format)
    logger = build_cli_logger(emoji=emoji)
    root_path = _resolve_root(root)
    context = RunContext.create("git-hook")
    try:
        services = _load_services(root_path, exit_code=ExitCode.BLOCKED)
        targets = list(files) if files else asyncio.run(services.repository.get_staged_files(context))
    except CLIError as exc:
        _emit_status(logger, root_path, output_format, OrchestrationOutcome.FAILED, str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    except QualityGateError as exc:
        message = f"Unable to list staged files: {exc}"
        _emit_status(logger, root_path, output_format, OrchestrationOutcome.FAILED, message)
        raise typer.Exit(code=ExitCode.BLOCKED) from exc

    if not targets:
        _emit_status(logger, root_path, output_format, OrchestrationOutcome.SUCCESS, "No staged files to check")
        raise typer.Exit(code=ExitCode.PASS)

    result = asyncio.run(services.orchestrator.orchestrate(targets, FixOptions(), context=context))
    _report(result, logger, root_path, output_format)
    raise typer.Exit(code=ExitCode.PASS if result.passed else ExitCode.BLOCKED)


@app.command("agent-hook")
def agent_hook_command(
    stage: bool = typer.Option(False, "--stage/--no-stage", help="Stage files changed by fixes."),
    root: Path | None = typer.Option(None, "--root", "-r", help="Project root (defaults to cwd)."),
    emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Toggle emoji output."),
    output_format: str = typer.Option(
        TEXT_FORMAT,
        "--format",
        "-f",
        case_sensitive=False,
        help="Output format: text (default) or json.",
    ),
) -> None:
    """Agent facade reading a tool payload from stdin: exit 2 blocks the agent."""

    output_format = resolve_output_format(output_format)
    logger = build_cli_logger(emoji=emoji, stderr=True)
    payload = parse_agent_payload(sys.stdin.read())
    if payload is None:
        LOGGER.debug("Ignoring malformed agent payload")
        raise typer.Exit(code=ExitCode.PASS)
    if not payload.is_file_edit:
        LOGGER.debug("Ignoring agent tool %s", payload.tool_name)
        raise typer.Exit(code=ExitCode.PASS)

    root_path = _resolve_root(root)
    try:
        target = normalize_path(payload.tool_input.file_path, root_path)
    except PathValidationError as exc:
        LOGGER.debug("Ignoring agent payload with unusable file path: %s", exc)
        raise typer.Exit(code=ExitCode.PASS) from exc
    try:
        services = _load_services(root_path, exit_code=ExitCode.PASS)
    except CLIError as exc:
        logger.warn(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc

    if target.suffix.lower() not in services.config.tools.extensions:
        LOGGER.debug("Ignoring unsupported file type %s", target)
        raise typer.Exit(code=ExitCode.PASS)

    context = RunContext.create("agent-hook")
    options = FixOptions(attempt_fix=True, stage=stage)
    result = asyncio.run(services.orchestrator.orchestrate([target], options, context=context))
    if output_format == JSON_FORMAT:
        _report(result, logger, root_path, output_format)
    if result.outcome is OrchestrationOutcome.FAILED:
        if output_format == TEXT_FORMAT:
            logger.warn(f"Quality gate could not run: {result.error}")
        raise typer.Exit(code=ExitCode.PASS)
    if result.outcome is OrchestrationOutcome.BLOCKED:
        if output_format == TEXT_FORMAT:
            _report(result, logger, root_path)
        raise typer.Exit(code=ExitCode.AGENT_BLOCKED)
    raise typer.Exit(code=ExitCode.PASS)


@app.command("install-hooks")
def install_hooks_command(
    root: Path | None = typer.Option(None, "--root", "-r", help="Repository root (defaults to cwd)."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be installed."),
    force: bool = typer.Option(False, "--force", help="Replace an existing foreign hook after backing it up."),
) -> None:
    """Install the ``pre-commit`` hook running ``quality-gate git-hook``."""

    logger = build_cli_logger()
    try:
        result = install_hooks(_resolve_root(root), dry_run=dry_run, force=force)
    except FileNotFoundError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=ExitCode.BLOCKED) from exc
    raise typer.Exit(code=ExitCode.PASS if result.installed else ExitCode.BLOCKED)


def main() -> None:
    """Console script entry point."""

    app()


__all__ = ["app", "main"]
