# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Parse tool payloads sent by coding agents to the ``agent-hook`` command."""

from __future__ import annotations

from typing import Final

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

SUPPORTED_AGENT_TOOLS: Final[frozenset[str]] = frozenset({"Write", "Edit", "MultiEdit"})


class AgentToolInput(BaseModel):
    """Arguments of the agent tool invocation that touched a file."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    file_path: str

    @field_validator("file_path")
    @classmethod
    def _require_path(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("file_path cannot be empty")
        return value


class AgentPayload(BaseModel):
    """Hook payload describing a completed agent tool call."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    tool_name: str
    tool_input: AgentToolInput

    @property
    def is_file_edit(self) -> bool:
        """Return ``True`` when the payload describes a supported file edit."""

        return self.tool_name in SUPPORTED_AGENT_TOOLS


def parse_agent_payload(raw: str) -> AgentPayload | None:
    """Return the payload encoded in ``raw`` or ``None`` when malformed."""

    try:
        return AgentPayload.model_validate_json(raw)
    except ValidationError:
        return None


__all__ = ["SUPPORTED_AGENT_TOOLS", "AgentPayload", "AgentToolInput", "parse_agent_payload"]
