"""HTML for listing pages and the fragments handed to the renderer."""

from __future__ import annotations

from html import escape
from typing import List
from urllib.parse import quote

from mdgrow.models import EntryKind, FileTreeNode, Listing, Outline
from mdgrow.web.frontend import RELOAD_SCRIPT_PATH, load_asset

_ICONS = {
    EntryKind.DIRECTORY: ("📁", "dir", ""),
    EntryKind.MARKDOWN: ("📝", "file", "markdown"),
    EntryKind.FILE: ("📄", "file", ""),
}


def href(relative_path: str) -> str:
    """Absolute URL for a root-relative path."""
    return "/" + quote(relative_path, safe="/")


def reload_script_tag() -> str:
    return f'<script src="{RELOAD_SCRIPT_PATH}"></script>'


def render_listing_page(listing: Listing) -> str:
    title = listing.relative_path or "Home"
    parts: List[str] = [
        "<!DOCTYPE html>",
        '<html><head><meta charset="UTF-8">',
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">',
        f"<title>{escape(title)} - Directory Listing</title>",
        reload_script_tag(),
        f"<style>{load_asset('listing.css')}</style>",
        '</head><body><div class="container">',
        f'<h1><span class="path">📁 /{escape(title)}</span></h1>',
        "<ul>",
    ]
    if listing.parent_link is not None:
        parts.append(
            f'<li><a href="{escape(href(listing.parent_link))}" class="parent">'
            '<span class="icon">⬆️</span>Parent Directory</a></li>'
        )
    for entry in listing.entries:
        icon, icon_class, link_class = _ICONS[entry.kind]
        parts.append(
            f'<li><a href="{escape(href(entry.relative_link))}" class="{link_class}">'
            f'<span class="icon {icon_class}">{icon}</span>{escape(entry.name)}</a></li>'
        )
    parts.append("</ul></div></body></html>")
    return "\n".join(parts)


def render_header_fragment() -> str:
    """Live-reload script and document stylesheet for the page head."""
    return f"{reload_script_tag()}\n<style>\n{load_asset('document.css')}</style>\n"


def render_outline(outline: Outline) -> str:
    if outline.is_empty:
        return '<p class="empty">No outline</p>'
    items = [
        f'<li class="toc-level-{entry.level}">'
        f'<a href="#{escape(entry.anchor_id)}">{escape(entry.text)}</a></li>'
        for entry in outline
    ]
    return '<ul class="toc">' + "".join(items) + "</ul>"


def _render_tree_nodes(nodes: List[FileTreeNode]) -> str:
    items = []
    for node in nodes:
        classes = ["dir" if node.is_directory else "file"]
        if node.is_current:
            classes.append("current")
        icon = "📁" if node.is_directory else "📄"
        item = (
            f'<li class="{" ".join(classes)}">'
            f'<a href="{escape(href(node.relative_path))}">{icon} {escape(node.name)}</a>'
        )
        if node.children:
            item += _render_tree_nodes(node.children)
        items.append(item + "</li>")
    return '<ul class="tree">' + "".join(items) + "</ul>"


def render_file_tree(tree: FileTreeNode) -> str:
    if not tree.children:
        return '<p class="empty">No files</p>'
    return _render_tree_nodes(tree.children)


def render_body_fragment(outline: Outline, tree: FileTreeNode) -> str:
    """Navigation sidebar prepended to the rendered document body."""
    return (
        '<nav class="mdgrow-sidebar">\n'
        '<a href="/">🏠 Home</a>\n'
        f"<h2>Contents</h2>\n{render_outline(outline)}\n"
        f"<h2>Files</h2>\n{render_file_tree(tree)}\n"
        "</nav>\n"
    )
