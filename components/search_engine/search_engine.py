"""Semantic search over the memory index."""

import logging
from typing import Callable, List, Sequence

from components.index_store import IndexRepository
from components.similarity import cosine_similarity
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.3
DEFAULT_MAX_RESULTS = 5
DESCRIPTION_PREVIEW_LENGTH = 100

QueryEmbedFn = Callable[[str], Sequence[float]]


class SearchResult(BaseModel):
    """A single ranked memory note."""

    score: float = Field(..., description="Cosine similarity to the query")
    path: str = Field(..., description="Absolute path of the note")
    group_name: str = Field(..., description="Name of the containing folder")
    file_name: str = Field(..., description="File name of the note")
    description: str = Field(default="", description="Note description")
    tags: List[str] = Field(default_factory=list, description="Note tags")


class SearchResponse(BaseModel):
    """Ranked results, plus whether an index was available at all."""

    index_found: bool = Field(
        default=True, description="False when no usable index could be loaded"
    )
    results: List[SearchResult] = Field(default_factory=list)


class SearchEngine:
    """Ranks indexed notes against a natural-language query."""

    def __init__(self, repository: IndexRepository, embed_fn: QueryEmbedFn):
        """
        Args:
            repository: Read access to the persisted index.
            embed_fn: Turns the query text into a vector. Its errors propagate
                to the caller of ``search``.
        """
        self.repository = repository
        self.embed_fn = embed_fn

    def search(
        self,
        query: str,
        threshold: float = DEFAULT_THRESHOLD,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> SearchResponse:
        """
        Return the notes most similar to a query, best first.

        Only entries carrying an embedding are considered. Results scoring
        below ``threshold`` are dropped; equal scores are ordered by path.
        """
        index = self.repository.load()
        if index is None:
            logger.error("Cannot load memory index; run a rebuild with embeddings")
            return SearchResponse(index_found=False)

        query_embedding = self.embed_fn(query)

        scored: List[SearchResult] = []
        for path, entry in index.entries.items():
            if not entry.has_embedding:
                continue
            if len(entry.embedding) != len(query_embedding):
                logger.warning(
                    f"Skipping {path}: embedding length {len(entry.embedding)} "
                    f"does not match query length {len(query_embedding)}"
                )
                continue

            score = cosine_similarity(query_embedding, entry.embedding)
            if score >= threshold:
                scored.append(
                    SearchResult(
                        score=score,
                        path=path,
                        group_name=entry.group_name,
                        file_name=entry.file_name,
                        description=entry.description,
                        tags=entry.tags,
                    )
                )

        scored.sort(key=lambda result: (-result.score, result.path))
        logger.debug(f"Search for '{query}' matched {len(scored)} entries")
        return SearchResponse(results=scored[: max(max_results, 0)])


def format_results(
    response: SearchResponse,
    query: str,
    preview_length: int = DESCRIPTION_PREVIEW_LENGTH,
) -> str:
    """Render search results for terminal output."""
    if not response.index_found:
        return (
            "Cannot load memory index.\n"
            "Run: memory-index rebuild --embed"
        )

    if not response.results:
        return (
            f'No relevant memories found for: "{query}"\n\n'
            "Tip: Rebuild with --embed to generate the embedding index."
        )

    lines = []
    for i, result in enumerate(response.results, start=1):
        description = result.description
        if len(description) > preview_length:
            description = description[:preview_length] + "..."
        lines.append(
            f"{i}. [{result.score:.2f}] {result.group_name}/{result.file_name}"
        )
        lines.append(f'   "{description}"')
        if result.tags:
            lines.append(f"   Tags: {', '.join(result.tags)}")
        lines.append("")

    lines.append(f"Found {len(response.results)} relevant memories")
    return "\n".join(lines)
