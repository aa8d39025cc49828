"""Exceptions raised by vault operations."""


class VaultError(Exception):
    """Base exception for vault operations."""

    pass


class NoteNotFoundError(VaultError):
    """Raised when a note does not exist in the vault."""

    pass


class InvalidPathError(VaultError):
    """Raised when a path escapes the vault root or the root itself is unusable."""

    pass


class MaterializationError(VaultError):
    """Raised when a note file cannot be decoded or its frontmatter parsed."""

    pass
