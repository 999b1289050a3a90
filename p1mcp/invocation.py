"""Per-call context for tool invocations and the errors tools raise."""

from __future__ import annotations

import dataclasses
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

_LOG = logging.getLogger("p1mcp")


def _default_logger() -> logging.LoggerAdapter:
    return logging.LoggerAdapter(_LOG, {})


@dataclass(frozen=True)
class InvocationContext:
    """Values carried through a single tool call."""

    tool_name: str | None = None
    transaction_id: str | None = None
    session_id: str | None = None
    request: Any = None
    logger: logging.LoggerAdapter = field(default_factory=_default_logger)


class ToolError(Exception):
    """A failure inside a tool that is not an API response error."""

    def __init__(self, tool_name: str, cause: BaseException | str) -> None:
        super().__init__(f"error in tool '{tool_name}': {cause}")
        self.tool_name = tool_name
        self.cause = cause


class ApiError(Exception):
    """A failure reported by, or inferred from, an API response."""

    def __init__(self, cause: BaseException | str, status_code: int | None = None) -> None:
        if status_code is None:
            message = f"API error: {cause}"
        else:
            message = f"API error (HTTP {status_code}): {cause}"
        super().__init__(message)
        self.cause = cause
        self.status_code = status_code


def generate_transaction_id() -> str:
    """Return a fresh identifier for one tool call."""
    return str(uuid.uuid4())


def initialize_tool_invocation(
    ctx: InvocationContext | None, name: str, request: Any
) -> InvocationContext:
    """Start a tool call: assign a transaction id and a tool-scoped logger."""
    base = ctx if ctx is not None else InvocationContext()
    transaction_id = generate_transaction_id()
    extra = {**(base.logger.extra or {}), "tool": name, "transactionId": transaction_id}
    result = dataclasses.replace(
        base,
        tool_name=name,
        transaction_id=transaction_id,
        request=request,
        logger=logging.LoggerAdapter(base.logger.logger, extra),
    )
    result.logger.debug("Invoked MCP tool")
    return result