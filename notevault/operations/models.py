"""Pydantic models for the operation protocol.

Each operation is one request model tagged by its `operation` field. Raw
payloads are parsed into exactly one variant with `parse_request` before
anything reaches the vault, so handlers only ever see well-typed arguments.

Example payloads:
    {"operation": "read_note", "path": "Projects/API"}
    {"operation": "search_notes", "query": "api design", "tags": ["work"], "limit": 5}
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import AfterValidator, BaseModel, Field, TypeAdapter

from notevault.vault.models import NoteOperation


def normalize_path(path: str) -> str:
    """Normalize a note path for consistent handling.

    This function ensures all paths are in a consistent format:
    - Strips leading/trailing whitespace
    - Strips leading/trailing slashes
    - Appends .md extension if not present

    Args:
        path: Raw path input from the client

    Returns:
        Normalized path with .md extension

    Raises:
        ValueError: If nothing is left after stripping

    Examples:
        >>> normalize_path("test")
        'test.md'
        >>> normalize_path("/Projects/API Design/")
        'Projects/API Design.md'
        >>> normalize_path("note.md")
        'note.md'
    """
    path = path.strip().strip("/")
    if not path:
        raise ValueError("path must not be empty")
    if not path.endswith(".md"):
        path = f"{path}.md"
    return path


NotePath = Annotated[str, AfterValidator(normalize_path)]


# =============================================================================
# Request Variants
# =============================================================================


class ListNotesRequest(BaseModel):
    """List all notes in the vault."""

    operation: Literal["list_notes"] = "list_notes"
    limit: int | None = Field(default=None, gt=0, description="Maximum number of notes to return")


class ReadNoteRequest(BaseModel):
    """Read a specific note by path."""

    operation: Literal["read_note"] = "read_note"
    path: NotePath = Field(..., description="Relative path to the note (e.g. 'folder/note.md')")


class WriteNoteRequest(BaseModel):
    """Create or overwrite a note."""

    operation: Literal["write_note"] = "write_note"
    path: NotePath = Field(..., description="Relative path for the note")
    content: str = Field(..., description="Markdown body of the note")
    metadata: dict[str, Any] | None = Field(default=None, description="YAML frontmatter")


class UpdateNoteRequest(BaseModel):
    """Update an existing note, merging frontmatter keys."""

    operation: Literal["update_note"] = "update_note"
    path: NotePath = Field(..., description="Relative path to an existing note")
    content: str | None = Field(default=None, description="Replacement body (kept if omitted)")
    metadata: dict[str, Any] | None = Field(
        default=None, description="Frontmatter keys to merge into the existing ones"
    )


class DeleteNoteRequest(BaseModel):
    """Delete a note."""

    operation: Literal["delete_note"] = "delete_note"
    path: NotePath = Field(..., description="Relative path to the note to delete")


class SearchNotesRequest(BaseModel):
    """Search notes by content, tags, or path."""

    operation: Literal["search_notes"] = "search_notes"
    query: str = Field(default="", description="Search query")
    tags: list[str] | None = Field(default=None, description="Filter by tags (any match)")
    path: str | None = Field(default=None, description="Filter by path fragment")
    limit: int | None = Field(default=None, gt=0, description="Maximum number of results")
    include_content: bool = Field(default=True, description="Include full content in results")


class VaultStatsRequest(BaseModel):
    """Get statistics about the vault."""

    operation: Literal["vault_stats"] = "vault_stats"


class BulkItem(NoteOperation):
    """One bulk operation item with its path normalized like every other request."""

    path: NotePath = Field(..., description="Relative path to the note")


class BulkOperationRequest(BaseModel):
    """Apply create/update/delete/read operations in order, reporting failures per item."""

    operation: Literal["bulk_operation"] = "bulk_operation"
    operations: list[BulkItem] = Field(..., description="Operations to apply in order")


class SummarizeNoteRequest(BaseModel):
    """Generate an AI summary of a specific note."""

    operation: Literal["summarize_note"] = "summarize_note"
    path: NotePath = Field(..., description="Path to the note to summarize")


class SummarizeNotesRequest(BaseModel):
    """Generate an AI summary of multiple notes, by path or by search."""

    operation: Literal["summarize_notes"] = "summarize_notes"
    paths: list[NotePath] | None = Field(default=None, description="Paths to notes to summarize")
    query: str | None = Field(default=None, description="Search query to find notes")
    tags: list[str] | None = Field(default=None, description="Filter by tags")
    context: str | None = Field(default=None, description="Additional context for the summary")


class GenerateContentRequest(BaseModel):
    """Generate content using AI."""

    operation: Literal["generate_content"] = "generate_content"
    prompt: str = Field(..., min_length=1, description="Content generation prompt")
    context: str | None = Field(default=None, description="Additional context")


class ReformatNoteRequest(BaseModel):
    """Reformat a note using AI."""

    operation: Literal["reformat_note"] = "reformat_note"
    path: NotePath = Field(..., description="Path to the note to reformat")
    instructions: str = Field(..., min_length=1, description="Reformatting instructions")


class ExtractTasksRequest(BaseModel):
    """Extract tasks and to-dos from notes."""

    operation: Literal["extract_tasks"] = "extract_tasks"
    paths: list[NotePath] | None = Field(default=None, description="Specific note paths")
    query: str | None = Field(default=None, description="Search query to find notes")
    tags: list[str] | None = Field(default=None, description="Filter by tags")


class WeeklyDigestRequest(BaseModel):
    """Generate a weekly digest of recently modified notes."""

    operation: Literal["weekly_digest"] = "weekly_digest"


class AnswerQuestionRequest(BaseModel):
    """Answer a question based on vault content."""

    operation: Literal["answer_question"] = "answer_question"
    question: str = Field(..., min_length=1, description="Question to answer")
    query: str | None = Field(default=None, description="Search query to find relevant notes")
    tags: list[str] | None = Field(default=None, description="Filter by tags")


class GenerateTagsRequest(BaseModel):
    """Generate suggested tags for a note using AI."""

    operation: Literal["generate_tags"] = "generate_tags"
    path: NotePath = Field(..., description="Path to the note")


REQUEST_MODELS: tuple[type[BaseModel], ...] = (
    ListNotesRequest,
    ReadNoteRequest,
    WriteNoteRequest,
    UpdateNoteRequest,
    DeleteNoteRequest,
    SearchNotesRequest,
    VaultStatsRequest,
    BulkOperationRequest,
    SummarizeNoteRequest,
    SummarizeNotesRequest,
    GenerateContentRequest,
    ReformatNoteRequest,
    ExtractTasksRequest,
    WeeklyDigestRequest,
    AnswerQuestionRequest,
    GenerateTagsRequest,
)

OperationRequest = Annotated[
    Union[
        ListNotesRequest,
        ReadNoteRequest,
        WriteNoteRequest,
        UpdateNoteRequest,
        DeleteNoteRequest,
        SearchNotesRequest,
        VaultStatsRequest,
        BulkOperationRequest,
        SummarizeNoteRequest,
        SummarizeNotesRequest,
        GenerateContentRequest,
        ReformatNoteRequest,
        ExtractTasksRequest,
        WeeklyDigestRequest,
        AnswerQuestionRequest,
        GenerateTagsRequest,
    ],
    Field(discriminator="operation"),
]

_request_adapter: TypeAdapter[OperationRequest] = TypeAdapter(OperationRequest)


def parse_request(payload: dict[str, Any]) -> OperationRequest:
    """Validate a raw payload into its request variant.

    Raises:
        pydantic.ValidationError: If the operation is unknown or arguments are invalid
    """
    return _request_adapter.validate_python(payload)


# =============================================================================
# Results
# =============================================================================


class NoteSummary(BaseModel):
    """Compact note listing entry."""

    path: str
    name: str
    tags: list[str] = Field(default_factory=list)
    modified: datetime


class DeletedNote(BaseModel):
    """Confirmation of a deletion."""

    path: str
    deleted: bool = True


class GeneratedText(BaseModel):
    """Text produced by the language model."""

    text: str


class SuggestedTags(BaseModel):
    """Tags suggested by the language model."""

    tags: list[str] = Field(default_factory=list)


class ErrorDetail(BaseModel):
    """Error information for a failed operation."""

    message: str
    type: str = "vault_error"
    code: str


class ErrorResponse(BaseModel):
    """Error envelope returned in HTTP error details."""

    error: ErrorDetail


class OperationResponse(BaseModel):
    """Outcome of one operation: either a result or an error, never both."""

    operation: str
    ok: bool
    result: Any = None
    error: ErrorDetail | None = None


class OperationInfo(BaseModel):
    """Catalogue entry describing an available operation."""

    name: str
    description: str
    input_schema: dict[str, Any]
