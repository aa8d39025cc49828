"""Prompt builders for text generation over notes."""

import json
from datetime import UTC, datetime, timedelta

from notevault.vault.models import Note

DIGEST_WINDOW = timedelta(days=7)
DIGEST_MAX_NOTES = 20


def _metadata_line(note: Note) -> str:
    if not note.metadata:
        return ""
    return f"Metadata: {json.dumps(note.metadata, indent=2, default=str)}"


def summarize_note_prompt(note: Note) -> str:
    """Build the single-note summary prompt."""
    tags = f"Tags: {', '.join(note.tags)}" if note.tags else ""
    return f"""Please provide a concise summary of the following note:

Title: {note.name}
{_metadata_line(note)}
{tags}

Content:
{note.content}

Summary:"""


def summarize_notes_prompt(notes: list[Note], context: str | None = None) -> str:
    """Build the multi-note summary prompt from the first 200 characters of each note."""
    previews = "\n\n".join(
        f"**{note.name}** ({', '.join(note.tags) or 'no tags'}): {note.content[:200]}..."
        for note in notes
    )
    scope = f" in the context of: {context}" if context else ""
    return f"""Please provide a comprehensive summary of the following notes{scope}:

{previews}

Please provide an organized summary that identifies key themes, important information, \
and connections between the notes:"""


def generate_content_prompt(prompt: str, context: str | None = None) -> str:
    """Prefix a free-form request with optional context."""
    if context:
        return f"Context: {context}\n\nRequest: {prompt}"
    return prompt


def reformat_note_prompt(note: Note, instructions: str) -> str:
    """Build the reformatting prompt."""
    return f"""Please reformat the following note according to these instructions: {instructions}

Original Note:
Title: {note.name}
{_metadata_line(note)}

Content:
{note.content}

Reformatted content:"""


def extract_tasks_prompt(notes: list[Note]) -> str:
    """Build the task extraction prompt over full note contents."""
    contents = "\n\n---\n\n".join(f"**{note.name}**:\n{note.content}" for note in notes)
    return f"""Please extract all tasks, to-dos, and action items from the following notes \
and organize them into a comprehensive task list:

{contents}

Please format the output as a markdown task list with priorities and due dates where mentioned:"""


def recent_notes(notes: list[Note], now: datetime | None = None) -> list[Note]:
    """Select notes modified within the digest window, newest first.

    Args:
        notes: Candidate notes
        now: Reference time (defaults to the current UTC time)

    Returns:
        At most DIGEST_MAX_NOTES notes
    """
    cutoff = (now or datetime.now(UTC)) - DIGEST_WINDOW
    recent = [note for note in notes if note.modified > cutoff]
    recent.sort(key=lambda note: note.modified, reverse=True)
    return recent[:DIGEST_MAX_NOTES]


def weekly_digest_prompt(notes: list[Note]) -> str:
    """Build the digest prompt from already-selected recent notes."""
    previews = "\n\n".join(
        f"**{note.name}** ({note.modified.date().isoformat()}): {note.content[:300]}..."
        for note in notes
    )
    return f"""Please create a weekly digest from the following recent notes. \
Identify key themes, important developments, and actionable insights:

{previews}

Weekly Digest:"""


def answer_question_prompt(question: str, notes: list[Note]) -> str:
    """Build a question-answering prompt grounded in note contents."""
    contents = "\n\n---\n\n".join(f"**{note.name}**: {note.content}" for note in notes)
    return f"""Based on the following notes from my vault, please answer this question: {question}

Notes:
{contents}

Answer:"""


def generate_tags_prompt(note: Note) -> str:
    """Build the tag suggestion prompt from the first 1000 characters of a note."""
    return f"""Based on the content and context of this note, suggest 3-5 relevant tags:

Title: {note.name}
Content: {note.content[:1000]}

Please respond with only the tags, separated by commas, without the # symbol:"""


def parse_tags(text: str) -> list[str]:
    """Split a comma-separated model reply into tags.

    Examples:
        >>> parse_tags(" project, api-design ,, review ")
        ['project', 'api-design', 'review']
    """
    return [tag.strip() for tag in text.split(",") if tag.strip()]
