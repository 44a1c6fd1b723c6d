"""
Typo-tolerant category suggestions for the search box.

Pure and local: nothing here touches the network or mutates the vocabulary.
Similarity comes from rapidfuzz's WRatio; a suggestion's distance is
100 - score, so 0 means an exact (normalized) match.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from rapidfuzz import fuzz, utils

from bizdir.core.categories import CATEGORIES, POPULAR_SEARCHES
from bizdir.search.query import SearchQuery, normalize_query

MAX_SUGGESTIONS = 8
SIMILARITY_CUTOFF = 60.0


@dataclass(frozen=True)
class Suggestion:
    term: str
    distance: float


def prefix_matches(
    text: str,
    vocabulary: Sequence[str] = CATEGORIES,
    limit: int = MAX_SUGGESTIONS,
) -> list[str]:
    """Case-insensitive prefix match in vocabulary order."""
    needle = text.casefold()
    return [term for term in vocabulary if term.casefold().startswith(needle)][:limit]


def rank_candidates(
    text: str,
    vocabulary: Sequence[str] = CATEGORIES,
    limit: int = MAX_SUGGESTIONS,
    cutoff: float = SIMILARITY_CUTOFF,
) -> list[Suggestion]:
    """Approximate matches ranked by distance, ties broken by vocabulary order."""
    scored = []
    for index, term in enumerate(vocabulary):
        score = fuzz.WRatio(text, term, processor=utils.default_process)
        if score >= cutoff:
            scored.append((100.0 - score, index, term))
    scored.sort(key=lambda item: (item[0], item[1]))
    return [Suggestion(term=term, distance=distance) for distance, _, term in scored[:limit]]


def suggest(
    text: Optional[str],
    focused: bool = True,
    vocabulary: Sequence[str] = CATEGORIES,
    popular: Sequence[str] = POPULAR_SEARCHES,
    limit: int = MAX_SUGGESTIONS,
) -> list[str]:
    """
    Suggestions for the current search box contents.

    - empty: the popular list while focused, nothing otherwise
    - one character: prefix match
    - two or more: fuzzy match
    """
    text = (text or "").strip()
    if not text:
        return list(popular) if focused else []
    if len(text) == 1:
        return prefix_matches(text, vocabulary, limit)
    return [s.term for s in rank_candidates(text, vocabulary, limit)]


class SuggestionState(str, Enum):
    IDLE = "idle"
    PREFIX_MATCH = "prefix-match"
    FUZZY_MATCH = "fuzzy-match"


@dataclass
class SuggestionSession:
    """Per-input suggestion state: idle -> prefix-match -> fuzzy-match -> idle on clear or select."""
    vocabulary: Sequence[str] = CATEGORIES
    popular: Sequence[str] = POPULAR_SEARCHES
    focused: bool = False
    text: str = ""
    state: SuggestionState = SuggestionState.IDLE
    suggestions: list[str] = field(default_factory=list)

    def _refresh(self) -> list[str]:
        stripped = self.text.strip()
        if not stripped:
            self.state = SuggestionState.IDLE
        elif len(stripped) == 1:
            self.state = SuggestionState.PREFIX_MATCH
        else:
            self.state = SuggestionState.FUZZY_MATCH
        self.suggestions = suggest(self.text, self.focused, self.vocabulary, self.popular)
        return self.suggestions

    def focus(self) -> list[str]:
        self.focused = True
        return self._refresh()

    def blur(self) -> list[str]:
        self.focused = False
        return self._refresh()

    def update(self, text: str) -> list[str]:
        self.text = text
        return self._refresh()

    def clear(self) -> list[str]:
        return self.update("")

    def submit(self) -> SearchQuery:
        """Submit whatever is typed; resets to idle."""
        query = normalize_query(term=self.text)
        self._reset()
        return query

    def select(self, term: str) -> SearchQuery:
        """Pick a suggestion: goes straight to a search for it and back to idle."""
        query = normalize_query(term=term)
        self._reset()
        return query

    def _reset(self) -> None:
        self.text = ""
        self.state = SuggestionState.IDLE
        self.suggestions = []
