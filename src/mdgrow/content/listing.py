"""Directory listings for the browsing view."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, List, Tuple

from mdgrow.errors import IoFailure
from mdgrow.models import Entry, EntryKind, Listing, is_markdown_name

LOGGER = logging.getLogger(__name__)


def join_relative(relative_path: str, name: str) -> str:
    return f"{relative_path}/{name}" if relative_path else name


def parent_link(relative_path: str) -> str | None:
    """Parent of a relative path; the root is the empty path.

    Returns ``None`` when ``relative_path`` is already the root.
    """
    if not relative_path:
        return None
    head, _, _ = relative_path.rpartition("/")
    return head


def is_decodable(name: str) -> bool:
    """False for names carrying undecodable bytes (surrogate escapes)."""
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False


def iter_children(directory: Path) -> Iterator[Tuple[str, bool]]:
    """Yield ``(name, is_directory)`` for decodable direct children.

    Raises ``OSError`` if the directory cannot be opened or read.
    """
    with os.scandir(directory) as entries:
        for entry in entries:
            if not is_decodable(entry.name):
                LOGGER.debug("Skipping undecodable name in %s", directory)
                continue
            yield entry.name, _is_dir(entry)


def classify(name: str, is_directory: bool) -> EntryKind:
    if is_directory:
        return EntryKind.DIRECTORY
    if is_markdown_name(name):
        return EntryKind.MARKDOWN
    return EntryKind.FILE


def build_listing(directory: Path, relative_path: str) -> Listing:
    """List the direct children of ``directory``, sorted by name.

    Directories and files are interleaved in plain codepoint order.
    """
    try:
        children = sorted(iter_children(directory))
    except OSError as exc:
        LOGGER.error("Cannot read directory %s: %s", directory, exc)
        raise IoFailure("Cannot read directory") from exc

    entries: List[Entry] = [
        Entry(
            name=name,
            kind=classify(name, is_directory),
            relative_link=join_relative(relative_path, name),
        )
        for name, is_directory in children
    ]
    return Listing(
        relative_path=relative_path,
        parent_link=parent_link(relative_path),
        entries=entries,
    )
