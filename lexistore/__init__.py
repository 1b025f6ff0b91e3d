"""Lexistore: build query-optimized word-game stores from raw lexicons."""

__version__ = "0.1.0"
