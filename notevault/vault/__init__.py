"""Note store and search engine."""

from notevault.vault.errors import (
    InvalidPathError,
    MaterializationError,
    NoteNotFoundError,
    VaultError,
)
from notevault.vault.models import (
    BulkOperationResult,
    Note,
    NoteOperation,
    SearchQuery,
    SearchResult,
    VaultStats,
)
from notevault.vault.store import Vault

__all__ = [
    "BulkOperationResult",
    "InvalidPathError",
    "MaterializationError",
    "Note",
    "NoteNotFoundError",
    "NoteOperation",
    "SearchQuery",
    "SearchResult",
    "Vault",
    "VaultError",
    "VaultStats",
]
