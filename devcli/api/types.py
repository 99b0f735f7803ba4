"""Typed return values for API operations."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class FileMapperNode:
    """A file or folder as described by the file mapper API."""

    name: str
    path: str
    created_at: int = 0
    updated_at: int = 0
    source: str | None = None
    folder: bool = False
    children: list[FileMapperNode] = field(default_factory=list)
