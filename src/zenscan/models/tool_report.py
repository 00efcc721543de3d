"""Reports produced by external developer tools."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class ToolReport:
    """What an external tool reported, or why it could not be asked.

    ``rows`` holds the parsed output keyed by section name, each row a
    tuple of the section's columns.
    """

    tool: str
    available: bool = True
    unavailable_reason: str = ""
    rows: dict[str, list[tuple[str, ...]]] = field(default_factory=dict)
