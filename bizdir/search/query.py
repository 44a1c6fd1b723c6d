"""Normalization of raw search input into a SearchQuery."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SearchQuery:
    """
    Normalized search request. Each field is None when not provided.

    No case folding happens here; matching is case-insensitive downstream.
    """
    term: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.term is None and self.category is None and self.location is None


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_query(
    term: Optional[str] = None,
    category: Optional[str] = None,
    location: Optional[str] = None,
) -> SearchQuery:
    """Trim each field; absent or all-whitespace values become None. Never raises."""
    return SearchQuery(term=_clean(term), category=_clean(category), location=_clean(location))
