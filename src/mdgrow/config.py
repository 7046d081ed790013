"""Application configuration defaults."""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

DEFAULT_RENDERER = ("unidoc", "-s")
RENDERER_ENV = "MDGROW_RENDERER"


def _get_default_renderer() -> Tuple[str, ...]:
    """Get the renderer command, honoring an optional environment override."""
    override = os.environ.get(RENDERER_ENV)
    if override and override.strip():
        return tuple(shlex.split(override))
    return DEFAULT_RENDERER


@dataclass(slots=True)
class AppConfig:
    root: Path = Path(".")
    host: str = "0.0.0.0"
    port: int = 8080
    renderer_command: Tuple[str, ...] = field(default_factory=_get_default_renderer)
    subscriber_buffer: int = 16
    keepalive_seconds: int = 15
    watch: bool = True
    watch_debounce_ms: int = 100
    tree_depth: int = 3
    toc_max_level: int = 3

    def __post_init__(self) -> None:
        self.root = Path(self.root)
        if isinstance(self.renderer_command, str):
            self.renderer_command = tuple(shlex.split(self.renderer_command))
        if not self.renderer_command:
            raise ValueError("Renderer command must not be empty")
        if self.subscriber_buffer < 1:
            raise ValueError("Subscriber buffer must hold at least one signal")
        if not 1 <= self.toc_max_level <= 4:
            raise ValueError("Outline level limit must be between 1 and 4")

    def resolve_root(self, base_dir: Path | None = None) -> Path:
        """Return the canonical content root.

        Relative roots are taken against ``base_dir`` (or the current
        directory). Raises ``ValueError`` if the root is not a directory.
        """
        root = self.root.expanduser()
        if not root.is_absolute() and base_dir is not None:
            root = base_dir / root
        canonical = Path(os.path.realpath(root))
        if not canonical.is_dir():
            raise ValueError(f"Root directory not found: {root}")
        return canonical
