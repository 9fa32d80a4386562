# ruff: noqa: B008

import logging

from components.document_processing import NoteDirectoryError
from components.embedding_system import EmbeddingError
from components.index_store import IndexStoreError
from components.memory_service import MemoryService, NoteNotFoundError
from fastapi import Depends, FastAPI, HTTPException

from .models import (
    EntryListResponse,
    QueryRequest,
    QueryResponse,
    RebuildRequest,
    RebuildResponse,
    RelatedHit,
    RelatedRequest,
    RelatedResponse,
    SearchHit,
    StatsResponse,
    UpdateRequest,
    UpdateResponse,
)

logger = logging.getLogger(__name__)


def create_app(service: MemoryService) -> FastAPI:
    """
    Creates and configures the FastAPI application, registering all routes.
    This function returns the app object but does not run it.

    Args:
        service: The fully initialized MemoryService instance.

    Returns:
        The configured FastAPI app instance.
    """
    app = FastAPI(title="Memory Index API")

    # Dependency provider to make the service available to endpoints
    def get_service() -> MemoryService:
        return service

    # Register all API routes
    @app.post(
        "/query",
        response_model=QueryResponse,
        tags=["search"],
        operation_id="search_memories",
    )
    def search(
        request: QueryRequest, svc: MemoryService = Depends(get_service)
    ) -> QueryResponse:
        try:
            response = svc.search(
                request.query,
                threshold=request.threshold,
                max_results=request.max_results,
            )
        except EmbeddingError as e:
            logger.error(f"Search failed: {e}")
            raise HTTPException(
                status_code=503, detail="Embedding model unavailable"
            ) from e

        return QueryResponse(
            index_found=response.index_found,
            results=[SearchHit(**result.model_dump()) for result in response.results],
        )

    @app.post(
        "/related",
        response_model=RelatedResponse,
        tags=["related"],
        operation_id="find_related_memories",
    )
    def related(
        request: RelatedRequest, svc: MemoryService = Depends(get_service)
    ) -> RelatedResponse:
        if request.file_path is None and not (request.tags or request.keywords):
            raise HTTPException(
                status_code=422, detail="Provide file_path or tags/keywords"
            )
        try:
            matches = svc.find_related(
                request.file_path,
                tags=request.tags,
                keywords=request.keywords,
                limit=request.limit,
            )
        except NoteNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e

        return RelatedResponse(
            matches=[
                RelatedHit(
                    path=match.path,
                    group_name=match.entry.group_name,
                    file_name=match.entry.file_name,
                    description=match.entry.description,
                    score=match.score,
                    shared_tags=match.shared_tags,
                    shared_keywords=match.shared_keywords,
                )
                for match in matches
            ]
        )

    @app.post(
        "/update",
        response_model=UpdateResponse,
        tags=["admin"],
        operation_id="update_memory",
    )
    def update(
        request: UpdateRequest, svc: MemoryService = Depends(get_service)
    ) -> UpdateResponse:
        try:
            updated = svc.update_file(request.file_path, embed=request.embed)
        except NoteNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        except IndexStoreError as e:
            raise HTTPException(status_code=500, detail=str(e)) from e

        if not updated:
            return UpdateResponse(
                success=False,
                message=f"No valid frontmatter found in {request.file_path}",
            )
        return UpdateResponse(
            success=True, message=f"Updated index for: {request.file_path}"
        )

    @app.post(
        "/rebuild",
        response_model=RebuildResponse,
        tags=["admin"],
        operation_id="rebuild_index",
    )
    def rebuild(
        request: RebuildRequest, svc: MemoryService = Depends(get_service)
    ) -> RebuildResponse:
        try:
            summary = svc.rebuild_index(embed=request.embed)
        except NoteDirectoryError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        except IndexStoreError as e:
            raise HTTPException(status_code=500, detail=str(e)) from e

        return RebuildResponse(
            success=True,
            message=f"Memory index built: {summary.accepted_count} files indexed",
            files_indexed=summary.accepted_count,
            files_skipped=summary.skipped_count,
            embeddings_generated=summary.embedded_count,
            embedding_failures=summary.embedding_failure_count,
            duration_ms=summary.index.stats.last_scan_duration_ms,
        )

    @app.get(
        "/entries",
        response_model=EntryListResponse,
        tags=["index"],
        operation_id="list_indexed_files",
    )
    def list_entries(svc: MemoryService = Depends(get_service)) -> EntryListResponse:
        files = svc.list_indexed_files()
        return EntryListResponse(files=files, total_count=len(files))

    @app.get(
        "/stats",
        response_model=StatsResponse,
        tags=["index"],
        operation_id="get_index_stats",
    )
    def stats(svc: MemoryService = Depends(get_service)) -> StatsResponse:
        return StatsResponse(**svc.get_stats())

    return app
