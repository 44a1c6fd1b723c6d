"""Search screen state: suggestions while typing, results after submit."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from bizdir.client.api import ApiError, DirectoryClient
from bizdir.search.query import SearchQuery
from bizdir.search.suggest import SuggestionSession

logger = logging.getLogger(__name__)


@dataclass
class SearchView:
    client: DirectoryClient
    box: SuggestionSession = field(default_factory=SuggestionSession)
    category: Optional[str] = None
    results: list[Dict[str, Any]] = field(default_factory=list)
    count: int = 0
    error: Optional[str] = None
    last_query: Optional[SearchQuery] = None

    def type(self, text: str) -> list[str]:
        return self.box.update(text)

    def submit(self) -> list[Dict[str, Any]]:
        return self._run(self.box.submit())

    def choose(self, suggestion: str) -> list[Dict[str, Any]]:
        return self._run(self.box.select(suggestion))

    def _run(self, query: SearchQuery) -> list[Dict[str, Any]]:
        self.last_query = query
        self.error = None
        try:
            data = self.client.search(q=query.term, category=self.category, location=query.location)
        except ApiError as e:
            # Empty state rather than stale results
            logger.warning(f"Search failed: {e.status_code} {e.message}")
            self.error = e.message
            self.results, self.count = [], 0
            return self.results
        self.results, self.count = data["businesses"], data["count"]
        return self.results
