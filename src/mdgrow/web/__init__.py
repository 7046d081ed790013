"""FastAPI application serving the content root."""
