"""Filesystem-backed note store.

`Vault` turns a directory of markdown files into an addressable collection.
There is no index or cache: multi-note operations re-read the whole tree
from disk and single-note operations go straight to one file.
"""

import asyncio
import posixpath
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from notevault.log import logger
from notevault.vault.errors import (
    InvalidPathError,
    MaterializationError,
    NoteNotFoundError,
)
from notevault.vault.models import (
    EPOCH,
    BulkError,
    BulkOperationResult,
    Note,
    NoteOperation,
    SearchQuery,
    SearchResult,
    VaultStats,
)
from notevault.vault.parser import extract_tags, render_note, split_frontmatter
from notevault.vault.search import rank

NOTE_EXTENSION = ".md"

# Directories never scanned for notes
IGNORED_DIRS = frozenset({".git", "node_modules"})


def _timestamp(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=UTC)


@dataclass
class Vault:
    """Note store rooted at a vault directory.

    Raises:
        InvalidPathError: On construction, if the root is missing or not a directory
    """

    root: Path

    def __post_init__(self) -> None:
        self.root = Path(self.root).expanduser().resolve()
        if not self.root.exists():
            raise InvalidPathError(f"Vault path does not exist: {self.root}")
        if not self.root.is_dir():
            raise InvalidPathError(f"Vault path is not a directory: {self.root}")

    def _validate_path(self, relative_path: str) -> tuple[str, Path]:
        """Validate a note path and resolve it within the vault.

        The lexical checks run before anything touches the filesystem; the
        resolved path is checked again so symlinks cannot leave the root.

        Args:
            relative_path: Slash-separated path relative to the vault root

        Returns:
            Tuple of (normalized relative path, resolved absolute path)

        Raises:
            InvalidPathError: If the path is empty, not a note, or escapes the vault
        """
        if not relative_path or not relative_path.strip():
            raise InvalidPathError("Note path is required")
        if "\x00" in relative_path:
            raise InvalidPathError(f"Path contains a null byte: {relative_path!r}")

        normalized = posixpath.normpath(relative_path.replace("\\", "/"))
        if posixpath.isabs(normalized) or normalized == ".." or normalized.startswith("../"):
            raise InvalidPathError(f"Path traversal detected: {relative_path}")
        if not normalized.endswith(NOTE_EXTENSION):
            raise InvalidPathError(f"Not a note path (expected {NOTE_EXTENSION}): {relative_path}")

        full_path = (self.root / normalized).resolve()
        if not full_path.is_relative_to(self.root):
            raise InvalidPathError(f"Path traversal detected: {relative_path}")
        return normalized, full_path

    # -------------------------------------------------------------------------
    # Enumeration & materialization
    # -------------------------------------------------------------------------

    def _discover(self) -> list[str]:
        """List relative paths of every note file, skipping control directories."""
        paths = []
        for file in self.root.rglob(f"*{NOTE_EXTENSION}"):
            relative = file.relative_to(self.root)
            if IGNORED_DIRS.intersection(relative.parts[:-1]):
                continue
            if file.is_file():
                paths.append(relative.as_posix())
        return sorted(paths)

    async def materialize(self, relative_path: str) -> Note:
        """Parse a note file into a Note.

        Args:
            relative_path: Path relative to the vault root

        Returns:
            Note with body, metadata, derived tags and filesystem timestamps

        Raises:
            InvalidPathError: If the path escapes the vault
            NoteNotFoundError: If no file exists at the path
            MaterializationError: If the file cannot be decoded or parsed
        """
        path, full_path = self._validate_path(relative_path)
        if not full_path.is_file():
            raise NoteNotFoundError(f"Note not found: {path}")

        try:
            with full_path.open(encoding="utf-8", newline="") as f:
                text = f.read()
        except UnicodeDecodeError as e:
            raise MaterializationError(f"Cannot decode {path}: {e}") from e

        metadata, content = split_frontmatter(text)
        stat = full_path.stat()

        return Note(
            path=path,
            name=posixpath.basename(path)[: -len(NOTE_EXTENSION)],
            content=content,
            metadata=metadata,
            tags=extract_tags(content, metadata),
            created=_timestamp(getattr(stat, "st_birthtime", stat.st_ctime)),
            modified=_timestamp(stat.st_mtime),
        )

    async def list_all(self, limit: int | None = None) -> list[Note]:
        """Materialize every note in the vault.

        A note that fails to materialize is logged and skipped so one broken
        file never makes the rest of the vault unreadable.

        Args:
            limit: Optional maximum number of notes to return

        Returns:
            Notes in path order
        """
        notes: list[Note] = []
        for path in self._discover():
            try:
                notes.append(await self.materialize(path))
            except Exception as e:
                logger.warning(
                    "note_materialization_failed",
                    extra={"path": path, "error": str(e)},
                )
        if limit:
            return notes[:limit]
        return notes

    # -------------------------------------------------------------------------
    # Single-note operations
    # -------------------------------------------------------------------------

    async def read(self, path: str) -> Note:
        """Read a note.

        Raises:
            NoteNotFoundError: If the note does not exist
        """
        return await self.materialize(path)

    async def read_many(self, paths: list[str]) -> list[Note]:
        """Read several notes concurrently, in the order given."""
        return list(await asyncio.gather(*(self.read(path) for path in paths)))

    async def write(
        self, path: str, content: str, metadata: dict[str, Any] | None = None
    ) -> Note:
        """Create or overwrite a note.

        Parent directories are created as needed. The returned note is
        re-read from disk, so it reflects exactly what was written.

        Args:
            path: Relative path to the note
            content: Markdown body
            metadata: Frontmatter; omitted or empty writes no block

        Returns:
            The note as now stored
        """
        path, full_path = self._validate_path(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_text(render_note(content, metadata), encoding="utf-8", newline="")

        logger.info("note_written", extra={"path": path, "has_metadata": bool(metadata)})
        return await self.materialize(path)

    async def update(
        self,
        path: str,
        content: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Note:
        """Update an existing note.

        Content is replaced when given. Metadata is merged key by key into
        the existing frontmatter rather than replacing it.

        Raises:
            NoteNotFoundError: If the note does not exist
        """
        existing = await self.read(path)
        new_content = content if content is not None else existing.content
        new_metadata = existing.metadata
        if metadata is not None:
            new_metadata = {**existing.metadata, **metadata}
        return await self.write(existing.path, new_content, new_metadata)

    async def delete(self, path: str) -> None:
        """Delete a note. There is no trash; deletion is permanent.

        Raises:
            NoteNotFoundError: If the note does not exist
        """
        path, full_path = self._validate_path(path)
        if not full_path.is_file():
            raise NoteNotFoundError(f"Note not found: {path}")
        full_path.unlink()
        logger.info("note_deleted", extra={"path": path})

    # -------------------------------------------------------------------------
    # Collection operations
    # -------------------------------------------------------------------------

    async def search(self, query: SearchQuery) -> list[SearchResult]:
        """Search the vault, highest score first.

        See `notevault.vault.search` for the scoring rules.
        """
        results = rank(await self.list_all(), query)
        logger.debug(
            "vault_search_ranked",
            extra={"query": query.query, "result_count": len(results)},
        )
        return results

    async def stats(self) -> VaultStats:
        """Count notes, total content size and latest modification."""
        notes = await self.list_all()
        total_size = 0
        last_modified = EPOCH

        for note in notes:
            total_size += len(note.content)
            if note.modified > last_modified:
                last_modified = note.modified

        return VaultStats(
            total_notes=len(notes),
            total_size=total_size,
            last_modified=last_modified,
        )

    async def bulk_operation(self, operations: list[NoteOperation]) -> BulkOperationResult:
        """Apply operations in order, collecting failures instead of raising.

        Each operation sees the effects of the ones before it. `processed`
        counts every attempted operation.
        """
        result = BulkOperationResult()

        for operation in operations:
            try:
                if operation.type in ("create", "update"):
                    await self.write(operation.path, operation.content or "", operation.metadata)
                elif operation.type == "delete":
                    await self.delete(operation.path)
                elif operation.type == "read":
                    await self.read(operation.path)
            except Exception as e:
                result.success = False
                result.errors.append(BulkError(path=operation.path, error=str(e)))
            finally:
                result.processed += 1

        logger.info(
            "bulk_operation_completed",
            extra={"processed": result.processed, "failed": len(result.errors)},
        )
        return result
