"""Operation dispatcher.

This module maps each request variant onto vault and generator calls and
converts the outcome into an `OperationResponse`. Vault and generation
exceptions never escape `dispatch`; they become error responses with a
stable code:

    not_found               NoteNotFoundError
    invalid_path            InvalidPathError
    materialization_failed  MaterializationError
    generation_failed       GenerationError
    internal_error          anything else (logged with traceback)
"""

from typing import Any

from pydantic import BaseModel

from notevault.dependencies import OperationDependencies
from notevault.generation import GenerationError
from notevault.log import logger
from notevault.operations.models import (
    REQUEST_MODELS,
    AnswerQuestionRequest,
    BulkOperationRequest,
    DeletedNote,
    DeleteNoteRequest,
    ErrorDetail,
    ExtractTasksRequest,
    GeneratedText,
    GenerateContentRequest,
    GenerateTagsRequest,
    ListNotesRequest,
    NoteSummary,
    OperationInfo,
    OperationRequest,
    OperationResponse,
    ReadNoteRequest,
    ReformatNoteRequest,
    SearchNotesRequest,
    SuggestedTags,
    SummarizeNoteRequest,
    SummarizeNotesRequest,
    UpdateNoteRequest,
    VaultStatsRequest,
    WeeklyDigestRequest,
    WriteNoteRequest,
)
from notevault.vault import (
    InvalidPathError,
    MaterializationError,
    Note,
    NoteNotFoundError,
    SearchQuery,
)

# Notes handed to answer_question when it searches first
ANSWER_SEARCH_LIMIT = 10


def describe_operations() -> list[OperationInfo]:
    """List every operation with its description and argument schema."""
    catalogue = []
    for model in REQUEST_MODELS:
        catalogue.append(
            OperationInfo(
                name=model.model_fields["operation"].default,
                description=(model.__doc__ or "").strip(),
                input_schema=model.model_json_schema(),
            )
        )
    return catalogue


def _to_json(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_to_json(item) for item in value]
    return value


async def _select_notes(
    deps: OperationDependencies,
    paths: list[str] | None,
    query: str | None,
    tags: list[str] | None,
    limit: int | None = None,
) -> list[Note]:
    """Resolve the notes a multi-note operation works on.

    Explicit paths are read concurrently; otherwise the notes come from a
    search with full content.
    """
    if paths:
        return await deps.vault.read_many(paths)
    results = await deps.vault.search(
        SearchQuery(query=query or "", tags=tags, limit=limit, include_content=True)
    )
    return [result.note for result in results]


# =============================================================================
# Main Dispatch Function
# =============================================================================


async def dispatch(request: OperationRequest, deps: OperationDependencies) -> OperationResponse:
    """Execute an operation request.

    Args:
        request: Parsed request variant
        deps: Vault, generator and trace id

    Returns:
        OperationResponse with `ok=True` and the result, or `ok=False` and
        an ErrorDetail. Never raises for vault or generation failures.
    """
    operation = request.operation
    logger.info("operation_called", extra={"operation": operation, "trace_id": deps.trace_id})

    try:
        result = await _execute(request, deps)
    except NoteNotFoundError as e:
        return _failure(operation, "not_found", str(e), deps)
    except InvalidPathError as e:
        return _failure(operation, "invalid_path", str(e), deps)
    except MaterializationError as e:
        return _failure(operation, "materialization_failed", str(e), deps)
    except GenerationError as e:
        return _failure(operation, "generation_failed", str(e), deps, error_type="generation_error")
    except Exception as e:
        logger.error(
            "operation_failed",
            extra={"operation": operation, "error": str(e), "trace_id": deps.trace_id},
            exc_info=True,
        )
        message = f"Error performing {operation}: {e!s}"
        return _failure(operation, "internal_error", message, deps, error_type="server_error")

    logger.info("operation_completed", extra={"operation": operation, "trace_id": deps.trace_id})
    return OperationResponse(operation=operation, ok=True, result=_to_json(result))


def _failure(
    operation: str,
    code: str,
    message: str,
    deps: OperationDependencies,
    error_type: str = "vault_error",
) -> OperationResponse:
    logger.info(
        "operation_rejected",
        extra={"operation": operation, "code": code, "error": message, "trace_id": deps.trace_id},
    )
    return OperationResponse(
        operation=operation,
        ok=False,
        error=ErrorDetail(message=message, type=error_type, code=code),
    )


async def _execute(request: OperationRequest, deps: OperationDependencies) -> Any:
    vault = deps.vault
    generator = deps.generator

    if isinstance(request, ListNotesRequest):
        notes = await vault.list_all(limit=request.limit)
        return [
            NoteSummary(path=n.path, name=n.name, tags=n.tags, modified=n.modified) for n in notes
        ]
    elif isinstance(request, ReadNoteRequest):
        return await vault.read(request.path)
    elif isinstance(request, WriteNoteRequest):
        return await vault.write(request.path, request.content, request.metadata)
    elif isinstance(request, UpdateNoteRequest):
        return await vault.update(request.path, request.content, request.metadata)
    elif isinstance(request, DeleteNoteRequest):
        await vault.delete(request.path)
        return DeletedNote(path=request.path)
    elif isinstance(request, SearchNotesRequest):
        return await vault.search(
            SearchQuery(
                query=request.query,
                tags=request.tags,
                path=request.path,
                limit=request.limit,
                include_content=request.include_content,
            )
        )
    elif isinstance(request, VaultStatsRequest):
        return await vault.stats()
    elif isinstance(request, BulkOperationRequest):
        return await vault.bulk_operation(request.operations)
    elif isinstance(request, SummarizeNoteRequest):
        note = await vault.read(request.path)
        return GeneratedText(text=await generator.summarize_note(note))
    elif isinstance(request, SummarizeNotesRequest):
        notes = await _select_notes(deps, request.paths, request.query, request.tags)
        return GeneratedText(text=await generator.summarize_notes(notes, request.context))
    elif isinstance(request, GenerateContentRequest):
        return GeneratedText(text=await generator.generate_content(request.prompt, request.context))
    elif isinstance(request, ReformatNoteRequest):
        note = await vault.read(request.path)
        return GeneratedText(text=await generator.reformat_note(note, request.instructions))
    elif isinstance(request, ExtractTasksRequest):
        notes = await _select_notes(deps, request.paths, request.query, request.tags)
        return GeneratedText(text=await generator.extract_tasks(notes))
    elif isinstance(request, WeeklyDigestRequest):
        notes = await vault.list_all()
        return GeneratedText(text=await generator.weekly_digest(notes))
    elif isinstance(request, AnswerQuestionRequest):
        if request.query or request.tags:
            notes = await _select_notes(
                deps, None, request.query, request.tags, limit=ANSWER_SEARCH_LIMIT
            )
        else:
            notes = await vault.list_all()
        return GeneratedText(text=await generator.answer_question(request.question, notes))
    elif isinstance(request, GenerateTagsRequest):
        note = await vault.read(request.path)
        return SuggestedTags(tags=await generator.generate_tags(note))

    raise ValueError(f"Unknown operation: {request.operation}")
