"""Core mdgrow data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Tuple

MARKDOWN_SUFFIXES = (".md", ".mkd")


def is_markdown_name(name: str) -> bool:
    """Return True for names with a Markdown extension (case-sensitive)."""
    return name.endswith(MARKDOWN_SUFFIXES)


@dataclass(frozen=True, slots=True)
class ResolvedPath:
    """Canonical filesystem path confined to the content root."""

    path: Path
    relative: str
    exists: bool
    is_directory: bool

    @property
    def is_markdown(self) -> bool:
        return not self.is_directory and is_markdown_name(self.path.name)


class EntryKind(str, Enum):
    DIRECTORY = "directory"
    MARKDOWN = "markdown"
    FILE = "file"


@dataclass(frozen=True, slots=True)
class Entry:
    """One child of a listed directory."""

    name: str
    kind: EntryKind
    relative_link: str

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


@dataclass(slots=True)
class Listing:
    """Navigational model of a single directory."""

    relative_path: str
    parent_link: str | None
    entries: List[Entry] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class TocEntry:
    level: int
    text: str
    anchor_id: str


@dataclass(frozen=True, slots=True)
class Outline:
    """Headings of a document in order of appearance.

    An outline without entries is the explicit "no outline" result; use
    ``EMPTY_OUTLINE`` rather than comparing lengths.
    """

    entries: Tuple[TocEntry, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def __iter__(self) -> Iterator[TocEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


EMPTY_OUTLINE = Outline()


@dataclass(slots=True)
class FileTreeNode:
    """Node of the navigation file tree.

    ``children`` is ``None`` for files and for directories that were listed
    but not expanded.
    """

    name: str
    relative_path: str
    is_directory: bool
    is_current: bool = False
    children: List["FileTreeNode"] | None = None

    @property
    def is_expanded(self) -> bool:
        return self.children is not None
