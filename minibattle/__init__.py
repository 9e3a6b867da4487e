"""Turn-based battle engine for the miniature collection game."""

__version__ = "0.1.0"
