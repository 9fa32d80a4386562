"""Metadata index and semantic search over markdown memory notes."""

__version__ = "0.1.0"
