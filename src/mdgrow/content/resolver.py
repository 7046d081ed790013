"""Confine untrusted request paths to the content root."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from mdgrow.errors import AccessDenied, NotFound
from mdgrow.models import ResolvedPath

LOGGER = logging.getLogger(__name__)


def is_confined(path: Path, root: Path) -> bool:
    """Segment-wise containment check; ``/base2`` is not inside ``/base``."""
    return path == root or path.is_relative_to(root)


def _canonical(path: Path) -> Path:
    return Path(os.path.realpath(path, strict=True))


def _nearest_existing_ancestor(candidate: Path) -> Path | None:
    for ancestor in candidate.parents:
        try:
            return _canonical(ancestor)
        except OSError:
            continue
    return None


def _relative_to_root(path: Path, root: Path) -> str:
    if path == root:
        return ""
    return path.relative_to(root).as_posix()


def resolve(root: Path, request_path: str) -> ResolvedPath:
    """Map ``request_path`` to a canonical path under ``root``.

    ``root`` must already be canonical (see ``AppConfig.resolve_root``).
    Raises ``AccessDenied`` for anything that escapes the root, including a
    missing leaf below an out-of-root ancestor, and ``NotFound`` for a
    missing leaf whose location would have been inside the root.
    """
    if "\x00" in request_path:
        LOGGER.warning("Rejected request path containing a NUL byte")
        raise AccessDenied()
    # Absolute-looking input replaces root in the join; containment rejects it.
    candidate = root / request_path
    try:
        canonical = _canonical(candidate)
    except ValueError:
        LOGGER.warning("Rejected malformed request path %r", request_path)
        raise AccessDenied() from None
    except OSError:
        _classify_missing(root, candidate, request_path)
        raise NotFound() from None

    if not is_confined(canonical, root):
        LOGGER.warning("Denied request path %r outside root", request_path)
        raise AccessDenied()

    return ResolvedPath(
        path=canonical,
        relative=_relative_to_root(canonical, root),
        exists=True,
        is_directory=canonical.is_dir(),
    )


def _classify_missing(root: Path, candidate: Path, request_path: str) -> None:
    """Raise ``AccessDenied`` when a missing target would lie outside root."""
    ancestor = _nearest_existing_ancestor(candidate)
    if ancestor is None or not is_confined(ancestor, root):
        LOGGER.warning("Denied probe %r below an out-of-root ancestor", request_path)
        raise AccessDenied()
    # Follows dangling symlinks and applies ".." after missing segments.
    would_be = Path(os.path.realpath(candidate))
    if not is_confined(would_be, root):
        LOGGER.warning("Denied request path %r outside root", request_path)
        raise AccessDenied()
