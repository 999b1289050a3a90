"""Selection of which tools and tool collections the server exposes."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ToolDefinition:
    """An MCP tool description together with its validation policy."""

    name: str
    title: str = ""
    description: str = ""
    input_schema: Mapping[str, Any] | None = None
    output_schema: Mapping[str, Any] | None = None
    read_only_hint: bool = False
    validation_policy: Mapping[str, bool] = field(default_factory=dict)

    def is_read_only(self) -> bool:
        """Return True when the tool only reads data."""
        return self.read_only_hint


@dataclass
class Filter:
    """Which tools and tool collections are made available by the server."""

    read_only: bool = False
    included_tools: Sequence[str] = ()
    excluded_tools: Sequence[str] = ()
    included_tool_collections: Sequence[str] = ()
    excluded_tool_collections: Sequence[str] = ()

    def should_include_tool(self, tool_def: ToolDefinition | None) -> bool:
        """Check a tool against the name lists and the read-only setting."""
        if tool_def is None:
            return False
        return should_include(
            tool_def.name, self.included_tools, self.excluded_tools
        ) and (not self.read_only or tool_def.is_read_only())

    def should_include_collection(self, collection_name: str) -> bool:
        """Check a collection name against the collection lists."""
        return should_include(
            collection_name,
            self.included_tool_collections,
            self.excluded_tool_collections,
        )


def passthrough_filter() -> Filter:
    """A filter that lets every tool and collection through."""
    return Filter(read_only=False)


def should_include(
    name: str,
    included: Sequence[str] | None,
    excluded: Sequence[str] | None,
) -> bool:
    """Decide on a name given an include list and an exclude list.

    Exclusion wins over inclusion; an empty include list admits every
    name that is not excluded.
    """
    if excluded and name in excluded:
        return False
    if not included:
        return True
    return name in included