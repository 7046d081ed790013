"""Error kinds raised while serving content.

Each error carries a client-safe ``detail`` and the HTTP status the web layer
maps it to. Errors are classified where they happen and passed through
unchanged to the HTTP boundary.
"""

from __future__ import annotations


class ContentError(Exception):
    """Base class for failures surfaced to HTTP clients."""

    status_code: int = 500
    default_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class AccessDenied(ContentError):
    """The request path escapes the configured root."""

    status_code = 403
    default_detail = "Access denied"


class NotFound(ContentError):
    """The request path is inside the root but nothing exists there."""

    status_code = 404
    default_detail = "Not found"


class IoFailure(ContentError):
    """Reading an existing in-root path failed.

    The detail stays generic; the underlying ``OSError`` is chained for logs.
    """

    status_code = 500
    default_detail = "Cannot read content"


class RenderFailure(ContentError):
    """The external Markdown renderer could not be started or exited non-zero."""

    status_code = 500
    default_detail = "Markdown conversion failed"
