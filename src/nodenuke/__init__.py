"""Find and delete node_modules directories without blocking the caller."""

__version__ = "0.3.0"
