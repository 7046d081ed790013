"""Outline and file-tree extraction for the document sidebar."""

from __future__ import annotations

import logging
import string
from pathlib import Path
from typing import List

from mdgrow.content.listing import iter_children, join_relative
from mdgrow.errors import IoFailure
from mdgrow.models import EMPTY_OUTLINE, FileTreeNode, Outline, TocEntry

LOGGER = logging.getLogger(__name__)

DEFAULT_TOC_LEVEL = 3
MAX_TOC_LEVEL = 4
TREE_DEPTH = 3

_ANCHOR_SAFE = frozenset((string.ascii_letters + string.digits + "-_").encode("ascii"))


def encode_identifier(text: str) -> str:
    """Percent-encode ``text`` the way the renderer builds heading ids.

    ASCII letters, digits, ``-`` and ``_`` pass through; every other UTF-8
    byte becomes ``%XX``.
    """
    return "".join(
        chr(byte) if byte in _ANCHOR_SAFE else f"%{byte:02X}"
        for byte in text.encode("utf-8")
    )


def anchor_id(level: int, text: str) -> str:
    return f"{level}-{encode_identifier(text)}"


def parse_heading(line: str, max_level: int = DEFAULT_TOC_LEVEL) -> TocEntry | None:
    """Return the outline entry for ``line`` or ``None`` if it is not one."""
    stripped = line.strip()
    level = len(stripped) - len(stripped.lstrip("#"))
    if level < 1 or level > max_level:
        return None
    text = stripped[level:].strip()
    if not text:
        return None
    return TocEntry(level=level, text=text, anchor_id=anchor_id(level, text))


def parse_outline(lines, max_level: int = DEFAULT_TOC_LEVEL) -> Outline:
    entries = []
    for line in lines:
        entry = parse_heading(line, max_level)
        if entry is not None:
            entries.append(entry)
    if not entries:
        return EMPTY_OUTLINE
    return Outline(tuple(entries))


def extract_toc(markdown_file: Path, *, max_level: int = DEFAULT_TOC_LEVEL) -> Outline:
    """Read ``markdown_file`` and return its heading outline.

    Headings deeper than ``max_level`` (at most 4) are ignored. A document
    without headings yields ``EMPTY_OUTLINE``.
    """
    if not 1 <= max_level <= MAX_TOC_LEVEL:
        raise ValueError(f"max_level must be between 1 and {MAX_TOC_LEVEL}")
    try:
        with markdown_file.open("r", encoding="utf-8", errors="replace") as handle:
            return parse_outline(handle, max_level)
    except OSError as exc:
        LOGGER.error("Cannot read %s: %s", markdown_file, exc)
        raise IoFailure("Cannot read file") from exc


def is_on_path(relative_path: str, current: str) -> bool:
    """True when ``relative_path`` is ``current`` or one of its ancestors."""
    if not relative_path:
        return True
    return current == relative_path or current.startswith(relative_path + "/")


def _tree_children(
    directory: Path, relative_path: str, current: str, depth: int, max_depth: int
) -> List[FileTreeNode]:
    visible = [
        (name, is_directory)
        for name, is_directory in iter_children(directory)
        if not name.startswith(".")
    ]
    # Directories first, then files, each by name.
    visible.sort(key=lambda item: (not item[1], item[0]))

    nodes: List[FileTreeNode] = []
    for name, is_directory in visible:
        child_path = join_relative(relative_path, name)
        node = FileTreeNode(
            name=name,
            relative_path=child_path,
            is_directory=is_directory,
            is_current=child_path == current,
        )
        if is_directory and depth + 1 < max_depth and is_on_path(child_path, current):
            node.children = _tree_children(
                directory / name, child_path, current, depth + 1, max_depth
            )
        nodes.append(node)
    return nodes


def build_file_tree(
    root: Path, current_relative_path: str, *, max_depth: int = TREE_DEPTH
) -> FileTreeNode:
    """Build the sidebar tree of ``root`` focused on the viewed document.

    Every level down to ``max_depth`` is listed along the active path; other
    directories appear collapsed.
    """
    current = current_relative_path.strip("/")
    tree = FileTreeNode(name="", relative_path="", is_directory=True, is_current=current == "")
    try:
        tree.children = _tree_children(root, "", current, 0, max_depth)
    except OSError as exc:
        LOGGER.error("Cannot build file tree for %s: %s", root, exc)
        raise IoFailure("Cannot read directory") from exc
    return tree
