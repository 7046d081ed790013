"""FastAPI application serving a content root with live reload."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import FileResponse, HTMLResponse, Response
from pydantic import BaseModel
from sse_starlette.sse import EventSourceResponse

from mdgrow import __version__
from mdgrow.config import AppConfig
from mdgrow.content.listing import build_listing
from mdgrow.content.navigation import build_file_tree, extract_toc
from mdgrow.content.resolver import resolve
from mdgrow.errors import ContentError
from mdgrow.models import ResolvedPath
from mdgrow.reload.broadcaster import ReloadBroadcaster
from mdgrow.reload.watcher import watch_root
from mdgrow.render.html import (
    render_body_fragment,
    render_header_fragment,
    render_listing_page,
)
from mdgrow.render.markdown import ExternalRenderer, Renderer
from mdgrow.web.frontend import RELOAD_EVENTS_PATH
from mdgrow.web.frontend import router as frontend_router

LOGGER = logging.getLogger(__name__)


class StatusPayload(BaseModel):
    root: str
    subscribers: int
    version: str = __version__


def _http_error(exc: ContentError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.detail)


async def reload_events(
    request: Request, broadcaster: ReloadBroadcaster
) -> AsyncIterator[dict[str, str]]:
    """Yield one SSE event per change signal until the client goes away."""
    async with broadcaster.subscribe() as subscription:
        async for _signal in subscription:
            if await request.is_disconnected():
                break
            yield {"event": "message", "data": "reload"}


def create_app(
    config: AppConfig,
    *,
    broadcaster: ReloadBroadcaster | None = None,
    renderer: Renderer | None = None,
    root: Path | None = None,
) -> FastAPI:
    """Build the application for ``config``.

    ``broadcaster`` and ``renderer`` default to fresh instances; pass them in
    to share or replace them.
    """
    content_root = root if root is not None else config.resolve_root(Path.cwd())
    reload_broadcaster = broadcaster or ReloadBroadcaster(config.subscriber_buffer)
    markdown_renderer = renderer or ExternalRenderer(config.renderer_command)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        watch_task: asyncio.Task | None = None
        if config.watch:
            watch_task = asyncio.create_task(
                watch_root(
                    content_root,
                    reload_broadcaster,
                    debounce_ms=config.watch_debounce_ms,
                )
            )
        yield
        if watch_task is not None:
            watch_task.cancel()
            try:
                await watch_task
            except asyncio.CancelledError:
                pass
        reload_broadcaster.close()

    # Every other path belongs to the content root, including "docs".
    app = FastAPI(
        title="mdgrow",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.config = config
    app.state.root = content_root
    app.state.broadcaster = reload_broadcaster
    app.state.renderer = markdown_renderer
    app.include_router(frontend_router)

    async def render_markdown(resolved: ResolvedPath) -> HTMLResponse:
        outline = await asyncio.to_thread(
            extract_toc, resolved.path, max_level=config.toc_max_level
        )
        tree = await asyncio.to_thread(
            build_file_tree, content_root, resolved.relative, max_depth=config.tree_depth
        )
        html = await markdown_renderer.render(
            resolved.path,
            render_header_fragment(),
            render_body_fragment(outline, tree),
        )
        return HTMLResponse(content=html)

    async def serve_path(request_path: str) -> Response:
        try:
            resolved = await asyncio.to_thread(resolve, content_root, request_path)
            if resolved.is_directory:
                listing = await asyncio.to_thread(
                    build_listing, resolved.path, resolved.relative
                )
                return HTMLResponse(content=render_listing_page(listing))
            if resolved.is_markdown:
                return await render_markdown(resolved)
        except ContentError as exc:
            raise _http_error(exc) from exc
        return FileResponse(resolved.path)

    @app.get(RELOAD_EVENTS_PATH)
    async def events(request: Request) -> EventSourceResponse:
        """SSE stream emitting ``reload`` whenever content changes."""
        return EventSourceResponse(
            reload_events(request, reload_broadcaster),
            ping=config.keepalive_seconds,
        )

    @app.get("/__status__")
    async def status() -> StatusPayload:
        return StatusPayload(
            root=str(content_root),
            subscribers=reload_broadcaster.subscriber_count,
        )

    @app.get("/", response_model=None)
    async def serve_root() -> Response:
        return await serve_path("")

    @app.get("/{request_path:path}", response_model=None)
    async def serve_any(request_path: str) -> Response:
        return await serve_path(request_path)

    return app
