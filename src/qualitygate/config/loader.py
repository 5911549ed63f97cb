# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Load :class:`GateConfig` from ``pyproject.toml`` and ``.quality-gate.toml``."""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import ValidationError

from ..errors import ConfigError
from .models import GateConfig

LOGGER = logging.getLogger(__name__)

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PROJECT_CONFIG_FILENAME: Final[str] = ".quality-gate.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "quality-gate"


def _read_toml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read {path}: {exc}") from exc


def _pyproject_section(path: Path) -> dict[str, Any]:
    tool_section = _read_toml(path).get(PYPROJECT_TOOL_KEY)
    if not isinstance(tool_section, Mapping):
        return {}
    section = tool_section.get(PYPROJECT_SECTION_KEY)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"[{PYPROJECT_TOOL_KEY}.{PYPROJECT_SECTION_KEY}] in {path} must be a table")
    return dict(section)


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(root: Path) -> GateConfig:
    """Return the configuration for the project at ``root``.

    ``[tool.quality-gate]`` in ``pyproject.toml`` is read first; values in
    ``.quality-gate.toml`` override it key by key.

    Args:
        root: Project root directory.

    Returns:
        GateConfig: Validated configuration, defaults when no file exists.

    Raises:
        ConfigError: If a file cannot be parsed or contains invalid values.
    """

    merged: dict[str, Any] = {}
    for path, fragment in (
        (root / PYPROJECT_FILENAME, _pyproject_section(root / PYPROJECT_FILENAME)),
        (root / PROJECT_CONFIG_FILENAME, _read_toml(root / PROJECT_CONFIG_FILENAME)),
    ):
        if fragment:
            LOGGER.debug("Loaded configuration fragment from %s", path)
            merged = _deep_merge(merged, fragment)
    try:
        return GateConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid quality gate configuration: {exc}") from exc


__all__ = ["PROJECT_CONFIG_FILENAME", "PYPROJECT_SECTION_KEY", "load_config"]
