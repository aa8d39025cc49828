"""Pydantic models for notes, search and vault aggregates."""

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

EPOCH = datetime.fromtimestamp(0, tz=UTC)


class Note(BaseModel):
    """A materialized note.

    Every field is rebuilt from disk on access; nothing here is cached
    between operations.

    Attributes:
        path: Slash-separated path relative to the vault root (e.g. 'Projects/API.md')
        name: Filename without the .md extension
        content: Body text after the frontmatter block
        metadata: Parsed YAML frontmatter (empty when the note has none)
        tags: Frontmatter tags plus inline #tags from the body
        created: Filesystem creation time (UTC)
        modified: Filesystem modification time (UTC)
    """

    path: str
    name: str
    content: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    created: datetime = EPOCH
    modified: datetime = EPOCH


class SearchQuery(BaseModel):
    """Criteria for a scored vault search."""

    query: str = ""
    tags: list[str] | None = None
    path: str | None = None
    limit: int | None = Field(default=None, ge=0)
    include_content: bool = False


class SearchResult(BaseModel):
    """A note that scored above zero for a query.

    Attributes:
        note: The matched note (content emptied unless requested)
        score: Relevance score, always positive
        matches: Matched query tokens, content hits before title hits
    """

    note: Note
    score: float = Field(..., ge=0.0)
    matches: list[str] = Field(default_factory=list)


class VaultStats(BaseModel):
    """Aggregate statistics over every readable note."""

    total_notes: int = 0
    total_size: int = 0
    last_modified: datetime = EPOCH


class NoteOperation(BaseModel):
    """One item of a bulk operation."""

    type: Literal["create", "update", "delete", "read"]
    path: str
    content: str | None = None
    metadata: dict[str, Any] | None = None


class BulkError(BaseModel):
    """A failed bulk operation item."""

    path: str
    error: str


class BulkOperationResult(BaseModel):
    """Outcome of a bulk operation.

    `processed` counts every attempted item, failed or not.
    """

    success: bool = True
    processed: int = 0
    errors: list[BulkError] = Field(default_factory=list)
