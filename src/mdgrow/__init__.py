"""mdgrow - local Markdown content server with live reload."""

__version__ = "0.1.0"
