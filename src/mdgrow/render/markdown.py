"""Markdown to HTML conversion through an external renderer."""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Protocol, Sequence

from mdgrow.config import DEFAULT_RENDERER
from mdgrow.errors import RenderFailure

LOGGER = logging.getLogger(__name__)


class Renderer(Protocol):
    async def render(self, file: Path, header_fragment: str, body_fragment: str) -> str:
        ...


@contextmanager
def fragment_files(header_fragment: str, body_fragment: str) -> Iterator[tuple[Path, Path]]:
    """Write both fragments to fresh temporary files, removed on exit.

    Names are unique per call so concurrent renders never share a file.
    """
    created: List[Path] = []
    try:
        for prefix, content in (("header-", header_fragment), ("body-", body_fragment)):
            fd, name = tempfile.mkstemp(prefix=f"mdgrow-{prefix}", suffix=".html")
            created.append(Path(name))
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)
        yield created[0], created[1]
    finally:
        for path in created:
            try:
                path.unlink()
            except FileNotFoundError:
                pass


class ExternalRenderer:
    """Runs ``<command> -H header.html -B body.html -- file`` and returns stdout."""

    def __init__(self, command: Sequence[str] = DEFAULT_RENDERER) -> None:
        if not command:
            raise ValueError("Renderer command must not be empty")
        self.command = tuple(command)

    def build_args(self, file: Path, header_path: Path, body_path: Path) -> List[str]:
        return [
            *self.command,
            "-H",
            str(header_path),
            "-B",
            str(body_path),
            "--",
            str(file),
        ]

    async def render(self, file: Path, header_fragment: str, body_fragment: str) -> str:
        try:
            with fragment_files(header_fragment, body_fragment) as (header_path, body_path):
                args = self.build_args(file, header_path, body_path)
                LOGGER.info("Running renderer: %s", shlex.join(args))
                stdout, stderr, returncode = await self._run(args)
        except OSError as exc:
            LOGGER.error("Unable to write renderer fragments: %s", exc)
            raise RenderFailure(f"Failed to prepare renderer input: {exc}") from exc

        if returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            LOGGER.error("Renderer exited with %d for %s: %s", returncode, file, message)
            raise RenderFailure(f"{self.command[0]} failed: {message}")
        try:
            return stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise RenderFailure(f"Invalid UTF-8 in renderer output: {exc}") from exc

    async def _run(self, args: List[str]) -> tuple[bytes, bytes, int]:
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            LOGGER.error("Failed to execute %s: %s", args[0], exc)
            raise RenderFailure(f"Failed to execute {args[0]}: {exc}") from exc
        stdout, stderr = await process.communicate()
        return stdout, stderr, process.returncode
