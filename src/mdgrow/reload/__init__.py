"""Live-reload fan-out and the filesystem change source feeding it."""
