"""Search service aggregating file, calculator and AI suggestions."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from result import Err, Ok, Result

from lumina.models.search import ActionType, SearchResult
from lumina.models.settings import Settings
from lumina.services.calculator import calculate
from lumina.services.file_search import search_files

logger = logging.getLogger(__name__)

_AI_INDICATORS = (
    "what",
    "how",
    "why",
    "when",
    "where",
    "who",
    "explain",
    "tell me",
    "help",
    "?",
)


def is_ai_query(query: str) -> bool:
    """Heuristic: does the query read like a question for the assistant?"""
    lowered = query.lower()
    return any(indicator in lowered for indicator in _AI_INDICATORS)


def create_ai_result(query: str) -> SearchResult:
    return SearchResult(
        id="ai_response",
        title=f"Ask AI: {query}",
        description="Get an AI response to your query",
        icon="🤖",
        action_type=ActionType.AI_RESPONSE,
        action_data=query,
        score=0.7,
    )


class SearchService:
    """Service for launcher search."""

    def __init__(self, settings: Callable[[], Settings], max_results: int = 10) -> None:
        self._settings = settings
        self._max_results = max_results

    async def search(self, query: str) -> Result[list[SearchResult], str]:
        """Return results ordered by score, best first."""
        if not query.strip():
            return Ok([])
        try:
            results = await asyncio.to_thread(
                search_files, query, list(self._settings().search_directories)
            )
        except Exception as exc:
            return Err(f"Search failed: {exc}")

        calc = calculate(query)
        if isinstance(calc, Ok):
            results.append(calc.ok_value)

        if not results or is_ai_query(query):
            results.append(create_ai_result(query))

        results.sort(key=lambda r: r.score, reverse=True)
        logger.debug("Search %r produced %d results", query, len(results))
        return Ok(results[: self._max_results])
