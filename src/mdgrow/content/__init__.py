"""Path resolution, directory listings and navigation models."""
