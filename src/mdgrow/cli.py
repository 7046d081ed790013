"""Command line interface for mdgrow."""

from __future__ import annotations

import logging
import socket
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from mdgrow.config import AppConfig
from mdgrow.content.navigation import MAX_TOC_LEVEL, build_file_tree, extract_toc
from mdgrow.errors import ContentError
from mdgrow.models import FileTreeNode
from mdgrow.web.app import create_app

console = Console()
app = typer.Typer(help="mdgrow - browse and live-preview a Markdown directory")

PORT_SEARCH_ATTEMPTS = 100


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _port_available(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            s.bind((host, port))
        except OSError:
            return False
    return True


def _find_available_port(host: str, start: int, attempts: int = PORT_SEARCH_ATTEMPTS) -> int:
    """Return the first bindable port at or above ``start``."""
    for port in range(start, min(start + attempts, 65536)):
        if _port_available(host, port):
            return port
    raise typer.BadParameter(f"No free port found in {start}-{start + attempts - 1}")


def _resolve_root(config: AppConfig) -> Path:
    try:
        return config.resolve_root(Path.cwd())
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def serve(
    directory: Path = typer.Argument(Path("."), help="Directory to serve."),
    host: str = typer.Option(AppConfig().host, help="Host to listen on"),
    port: int = typer.Option(AppConfig().port, help="Port number (next free port is used if busy)"),
    renderer: Optional[str] = typer.Option(
        None, help="Markdown renderer command (default: unidoc -s)"
    ),
    watch: bool = typer.Option(True, "--watch/--no-watch", help="Reload browsers on changes"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Serve a directory with Markdown rendering and live reload."""
    _setup_logging(verbose)
    overrides = {"renderer_command": renderer} if renderer else {}
    config = AppConfig(root=directory, host=host, port=port, watch=watch, **overrides)
    root = _resolve_root(config)

    chosen_port = _find_available_port(host, port)
    if chosen_port != port:
        console.print(f"[yellow]Port {port} is in use, using {chosen_port}.[/yellow]")
    config.port = chosen_port

    web_app = create_app(config, root=root)
    console.print(f"Serving [bold]{root}[/bold] on http://{host}:{chosen_port}")
    uvicorn.run(
        web_app,
        host=host,
        port=chosen_port,
        reload=False,
        log_level="debug" if verbose else "info",
    )


@app.command()
def toc(
    file: Path = typer.Argument(..., help="Markdown file", exists=True, dir_okay=False),
    max_level: int = typer.Option(
        AppConfig().toc_max_level, min=1, max=MAX_TOC_LEVEL, help="Deepest heading level"
    ),
) -> None:
    """Print the heading outline of a Markdown file."""
    try:
        outline = extract_toc(file, max_level=max_level)
    except ContentError as exc:
        raise typer.BadParameter(exc.detail) from exc

    if outline.is_empty:
        console.print("[yellow]No headings found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Level")
    table.add_column("Heading")
    table.add_column("Anchor")
    for entry in outline:
        table.add_row(str(entry.level), "  " * (entry.level - 1) + escape(entry.text), f"#{entry.anchor_id}")
    console.print(table)


def _add_tree_nodes(branch: Tree, nodes: list[FileTreeNode]) -> None:
    for node in nodes:
        label = escape(f"{node.name}/" if node.is_directory else node.name)
        if node.is_current:
            label = f"[bold magenta]{label}[/bold magenta]"
        child = branch.add(label)
        if node.children:
            _add_tree_nodes(child, node.children)


@app.command()
def tree(
    directory: Path = typer.Argument(Path("."), help="Root directory"),
    current: str = typer.Option("", help="Relative path of the viewed document"),
) -> None:
    """Print the navigation file tree as shown in the document sidebar."""
    root = _resolve_root(AppConfig(root=directory))
    try:
        file_tree = build_file_tree(root, current, max_depth=AppConfig().tree_depth)
    except ContentError as exc:
        raise typer.BadParameter(exc.detail) from exc

    view = Tree(f"[bold]{root}[/bold]")
    _add_tree_nodes(view, file_tree.children or [])
    console.print(view)
