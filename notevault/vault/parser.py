"""Frontmatter parsing, serialization and tag extraction.

The on-disk format is an optional leading block delimited by `---` lines
holding YAML key-value pairs, followed by the markdown body:

    ---
    status: draft
    tags:
      - project
    ---
    # Title

The line break after the closing delimiter belongs to the block, so a body
written with `render_note` is read back unchanged by `split_frontmatter`.
"""

import re
from typing import Any

import yaml
from frontmatter.default_handlers import YAMLHandler

from notevault.vault.errors import MaterializationError

FRONTMATTER_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(?P<block>.*?)^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)

# Inline tags: #tag, #multi-word-tag, #tag_2
INLINE_TAG_PATTERN = re.compile(r"#([\w-]+)")

_yaml = YAMLHandler()


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Split raw note text into frontmatter metadata and body.

    Args:
        text: Raw file contents

    Returns:
        Tuple of (metadata, body). Text without a leading block, or whose
        block is not a YAML mapping, yields empty metadata and the full text.

    Raises:
        MaterializationError: If the block is not valid YAML
    """
    match = FRONTMATTER_PATTERN.match(text)
    if not match:
        return {}, text

    try:
        metadata = _yaml.load(match.group("block"))
    except yaml.YAMLError as e:
        raise MaterializationError(f"Invalid frontmatter: {e}") from e

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        # A horizontal rule pair around plain text, not frontmatter
        return {}, text

    return {str(key): value for key, value in metadata.items()}, text[match.end() :]


def render_note(content: str, metadata: dict[str, Any] | None = None) -> str:
    """Serialize a note body with an optional frontmatter block.

    Args:
        content: Markdown body
        metadata: Frontmatter mapping; empty or None writes the body as-is

    Returns:
        Full file contents

    Examples:
        >>> render_note("Body", {"status": "draft"})
        '---\\nstatus: draft\\n---\\nBody'
        >>> render_note("Body")
        'Body'
    """
    if not metadata:
        return content
    block = _yaml.export(metadata, sort_keys=False)
    return f"---\n{block}\n---\n{content}"


def extract_tags(content: str, metadata: dict[str, Any]) -> list[str]:
    """Collect tags from frontmatter and inline #tags.

    Frontmatter `tags` may be a single value or a list; values are coerced
    to strings. Duplicates are dropped, first occurrence wins the position.

    Examples:
        >>> extract_tags("Plan for #work and #q3-goals", {"tags": ["work", "api"]})
        ['work', 'api', 'q3-goals']
    """
    tags: dict[str, None] = {}

    declared = metadata.get("tags")
    if declared:
        items = declared if isinstance(declared, list) else [declared]
        for tag in items:
            tags[str(tag)] = None

    for tag in INLINE_TAG_PATTERN.findall(content):
        tags[tag] = None

    return list(tags)
