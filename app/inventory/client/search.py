"""
Search and highlighting over the in-memory book list.

Matching is a case-insensitive substring test against title and author
only. Nothing here talks to the server.
"""

import html
import re
from collections.abc import Iterable, Mapping
from typing import Any

SEARCH_FIELDS = ("title", "author")


def _normalize_query(query: str | None) -> str:
    return query or ""


def matches(book: Mapping[str, Any], query: str | None) -> bool:
    """Whether the book's title or author contains the query, ignoring case."""
    needle = _normalize_query(query).lower()
    if not needle:
        return True
    return any(needle in str(book.get(field) or "").lower() for field in SEARCH_FIELDS)


def filter_books(books: Iterable[Mapping[str, Any]], query: str | None) -> list[Mapping[str, Any]]:
    """
    Return the books matching ``query``, in their original order.

    An empty query returns every book. Whitespace is matched literally.
    """
    return [book for book in books if matches(book, query)]


def highlight(text: str, query: str | None) -> list[tuple[str, bool]]:
    """
    Split ``text`` into segments, flagging the ones that match ``query``.

    >>> highlight("Dune Messiah", "dun")
    [('Dun', True), ('e Messiah', False)]
    """
    needle = _normalize_query(query)
    if not needle or not text:
        return [(text, False)] if text else []

    segments: list[tuple[str, bool]] = []
    position = 0
    for match in re.finditer(re.escape(needle), text, re.IGNORECASE):
        if match.start() > position:
            segments.append((text[position:match.start()], False))
        segments.append((match.group(), True))
        position = match.end()
    if position < len(text):
        segments.append((text[position:], False))
    return segments


def mark_matches(text: str, query: str | None, tag: str = "mark") -> str:
    """Render ``text`` as HTML with every match wrapped in ``<tag>``."""
    return "".join(
        f"<{tag}>{html.escape(segment)}</{tag}>" if is_match else html.escape(segment)
        for segment, is_match in highlight(text, query)
    )
