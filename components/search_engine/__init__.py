from .search_engine import (
    DEFAULT_MAX_RESULTS,
    DEFAULT_THRESHOLD,
    SearchEngine,
    SearchResponse,
    SearchResult,
    format_results,
)

__all__ = [
    "DEFAULT_MAX_RESULTS",
    "DEFAULT_THRESHOLD",
    "SearchEngine",
    "SearchResponse",
    "SearchResult",
    "format_results",
]
