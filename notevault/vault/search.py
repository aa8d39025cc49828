"""Relevance scoring for vault search.

Scores are additive for text matches and tag hits and multiplicative for
filter misses, so a note that matches the text but sits in the wrong
folder or lacks the requested tags still surfaces, ranked lower.
"""

from notevault.vault.models import Note, SearchQuery, SearchResult

CONTENT_MATCH_WEIGHT = 2
TITLE_MATCH_WEIGHT = 3
TAG_MATCH_BONUS = 5
TAG_MISS_PENALTY = 0.5
PATH_MISS_PENALTY = 0.3


def tokenize(query: str) -> list[str]:
    """Split a query into distinct lower-cased words, in order of appearance.

    Examples:
        >>> tokenize("  API  design api ")
        ['api', 'design']
    """
    return list(dict.fromkeys(query.lower().split()))


def find_matches(text: str, tokens: list[str]) -> list[str]:
    """Return the tokens contained in text, case-insensitively."""
    lower_text = text.lower()
    return [token for token in tokens if token in lower_text]


def score_note(note: Note, query: SearchQuery) -> tuple[float, list[str]]:
    """Score a single note against a query.

    Args:
        note: Materialized note
        query: Search criteria

    Returns:
        Tuple of (score, matched tokens). Content matches come before
        title matches; a token hitting both appears twice.
    """
    score = 0.0
    matches: list[str] = []

    if query.query:
        tokens = tokenize(query.query)

        content_matches = find_matches(note.content, tokens)
        score += CONTENT_MATCH_WEIGHT * len(content_matches)
        matches.extend(content_matches)

        title_matches = find_matches(note.name, tokens)
        score += TITLE_MATCH_WEIGHT * len(title_matches)
        matches.extend(title_matches)

    if query.tags:
        if set(query.tags) & set(note.tags):
            score += TAG_MATCH_BONUS
        elif query.query:
            score *= TAG_MISS_PENALTY

    if query.path and query.path not in note.path:
        score *= PATH_MISS_PENALTY

    return score, matches


def rank(notes: list[Note], query: SearchQuery) -> list[SearchResult]:
    """Score, filter and order notes for a query.

    Notes scoring zero are dropped, so a query with no text, tags or path
    returns nothing. Ties keep their enumeration order.
    """
    results: list[SearchResult] = []

    for note in notes:
        score, matches = score_note(note, query)
        if score <= 0:
            continue
        if not query.include_content:
            note = note.model_copy(update={"content": ""})
        results.append(SearchResult(note=note, score=score, matches=matches))

    results.sort(key=lambda r: r.score, reverse=True)

    if query.limit:
        return results[: query.limit]
    return results
