"""Request and response models for the memory index API."""

from typing import List, Optional

from pydantic import BaseModel, Field


class QueryRequest(BaseModel):
    """Request model for semantic search."""

    query: str = Field(..., description="Natural-language search query")
    threshold: Optional[float] = Field(
        default=None, description="Minimum similarity score (configured default)"
    )
    max_results: Optional[int] = Field(
        default=None, ge=0, description="Maximum number of results"
    )


class SearchHit(BaseModel):
    """A single semantic search hit."""

    score: float
    path: str
    group_name: str
    file_name: str
    description: str
    tags: List[str]


class QueryResponse(BaseModel):
    """Response model for semantic search."""

    index_found: bool = Field(..., description="False when no index exists yet")
    results: List[SearchHit]


class RelatedRequest(BaseModel):
    """Request model for related-note discovery."""

    file_path: Optional[str] = Field(
        default=None, description="Reference note whose frontmatter is used"
    )
    tags: List[str] = Field(default_factory=list, description="Reference tags")
    keywords: List[str] = Field(
        default_factory=list, description="Reference description keywords"
    )
    limit: Optional[int] = Field(default=None, ge=0, description="Maximum matches")


class RelatedHit(BaseModel):
    """A note sharing tags or keywords with the reference."""

    path: str
    group_name: str
    file_name: str
    description: str
    score: int
    shared_tags: List[str]
    shared_keywords: List[str]


class RelatedResponse(BaseModel):
    """Response model for related-note discovery."""

    matches: List[RelatedHit]


class UpdateRequest(BaseModel):
    """Request model for a single-note index update."""

    file_path: str = Field(..., description="Path to the markdown note")
    embed: bool = Field(default=False, description="Generate a description embedding")


class UpdateResponse(BaseModel):
    """Response model for a single-note index update."""

    success: bool
    message: str


class RebuildRequest(BaseModel):
    """Request model for a full index rebuild."""

    embed: bool = Field(default=False, description="Generate description embeddings")


class RebuildResponse(BaseModel):
    """Response model for a full index rebuild."""

    success: bool
    message: str
    files_indexed: int
    files_skipped: int
    embeddings_generated: int
    embedding_failures: int
    duration_ms: int


class EntryListResponse(BaseModel):
    """Response model for listing indexed notes."""

    files: List[str]
    total_count: int


class StatsResponse(BaseModel):
    """Response model for index statistics."""

    index_found: bool
    index_path: str
    version: Optional[int] = None
    last_full_scan_at: Optional[str] = None
    total_files: int = 0
    last_scan_duration_ms: int = 0
    embedded_files: int = 0
