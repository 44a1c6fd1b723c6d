"""Server-side field matcher: case-insensitive substring containment, no relevance scoring."""

from typing import Iterable, Protocol

from bizdir.search.query import SearchQuery


class Searchable(Protocol):
    name: str
    description: str
    category: str

    @property
    def display_address(self) -> str: ...


def _contains(haystack: str | None, needle: str) -> bool:
    return needle.casefold() in (haystack or "").casefold()


def record_matches(query: SearchQuery, record: Searchable) -> bool:
    """
    True when the record satisfies every active condition of the query:
    the term occurs in name, description, category or display address (any one),
    the category filter occurs in the category, and
    the location filter occurs in the display address.
    """
    address = record.display_address
    if query.term is not None and not any(
        _contains(field, query.term)
        for field in (record.name, record.description, record.category, address)
    ):
        return False
    if query.category is not None and not _contains(record.category, query.category):
        return False
    if query.location is not None and not _contains(address, query.location):
        return False
    return True


def filter_records(query: SearchQuery, records: Iterable[Searchable]) -> list:
    """Records matching the query, in input order. An empty query matches nothing."""
    if query.is_empty:
        return []
    return [r for r in records if record_matches(query, r)]
