"""Search query derivation for a source record.

Queries are returned most specific first. Artist + title cuts false positives
sharply, the title-only fallback catches artists spelled differently across
platforms ("The Beatles" vs "Beatles").
"""

from __future__ import annotations

from tunebridge.core.models.records import AlbumRecord, Record

# Marker of a broken upstream interpolation; such queries never reach the network
MALFORMED_QUERY_MARKER = "undefined"
ALBUM_KEYWORD = "album"


def is_usable_query(query: str | None) -> bool:
    """Check a query is non-blank and free of the malformed-interpolation marker."""
    if not query or not query.strip():
        return False
    return MALFORMED_QUERY_MARKER not in query


def _dedupe_usable(queries: list[str]) -> list[str]:
    usable: list[str] = []
    for query in queries:
        candidate = query.strip()
        if is_usable_query(candidate) and candidate not in usable:
            usable.append(candidate)
    return usable


def build_queries(source: Record) -> list[str]:
    """Build track search queries, first tried first.

    Args:
        source: Record to search for

    Returns:
        ``["{artist} {title}", "{title}"]`` minus empty, malformed or duplicate entries

    """
    title = (source.title or "").strip()
    artist = source.primary_artist.strip()

    queries: list[str] = []
    if artist:
        queries.append(f"{artist} {title}")
    queries.append(title)
    return _dedupe_usable(queries)


def build_album_queries(source: Record) -> list[str]:
    """Build album search queries with the ``album`` keyword appended to each tier."""
    title = (source.title or "").strip()
    artist = source.primary_artist.strip()
    if not title:
        return []

    queries: list[str] = []
    if artist:
        queries.append(f"{artist} {title} {ALBUM_KEYWORD}")
    queries.append(f"{title} {ALBUM_KEYWORD}")
    return _dedupe_usable(queries)


def queries_for(source: Record) -> list[str]:
    """Pick the query family matching the record type."""
    if isinstance(source, AlbumRecord):
        return build_album_queries(source)
    return build_queries(source)
