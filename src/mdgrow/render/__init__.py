"""HTML fragments and the external Markdown renderer."""
