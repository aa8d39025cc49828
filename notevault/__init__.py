"""Markdown note vault exposed as a structured, searchable store."""

__version__ = "1.0.0"
