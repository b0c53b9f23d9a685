"""REST API server for RepoIndex - read-only HTTP access to the repository index.

Lists, filters and fetches indexed records and reports index statistics.
"""

from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from repoindex.config import API_LIMIT, PAGE_SIZE, REPOSITORY_ROOT
from repoindex.records import IndexRecord

# --- Pydantic Models for OpenAPI Schema ---


class RecordOut(BaseModel):
    """A single indexed record."""

    id: str = Field(description="Record identifier")
    type: str = Field(description="Record type (structure, file, database, route, config, summary)")
    category: str | None = Field(default=None, description="Category bucket (e.g. app, migration, web)")
    name: str = Field(description="Display name")
    path: str | None = Field(default=None, description="Path relative to the repository root")
    description: str = Field(default="", description="Short description")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Type-specific metadata")
    content_preview: str | None = Field(default=None, description="Leading content or a sentinel")
    size: int | None = Field(default=None, description="Size in bytes (files only)")
    last_modified: str | None = Field(default=None, description="Modification time (files only)")
    created_at: str | None = Field(default=None, description="Insertion timestamp")
    updated_at: str | None = Field(default=None, description="Update timestamp")

    @classmethod
    def from_record(cls, record: IndexRecord) -> "RecordOut":
        return cls(**record.to_dict())


class StatsOut(BaseModel):
    """Aggregate index statistics."""

    total_items: int = Field(description="Total number of records")
    by_type: dict[str, int] = Field(description="Record count per type")
    by_category: dict[str, int] = Field(description="Record count per category")
    total_size: int = Field(description="Sum of file sizes in bytes")
    total_size_human: str = Field(description="Total size, human readable")


class PageResponse(BaseModel):
    """One page of a record listing."""

    data: list[RecordOut] = Field(description="Records on this page")
    total: int = Field(description="Number of matching records")
    page: int = Field(description="Current page (1-based)")
    per_page: int = Field(description="Records per page")
    last_page: int = Field(description="Last page number")
    stats: StatsOut = Field(description="Statistics for the whole index")


class ApiResponse(BaseModel):
    """Filtered records with index statistics."""

    data: list[RecordOut] = Field(description="Matching records")
    stats: StatsOut = Field(description="Statistics for the whole index")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service status")
    repository_root: str = Field(description="Configured repository root")
    repository_exists: bool = Field(description="Whether the repository root exists")
    index_exists: bool = Field(description="Whether the records table exists")


class ErrorResponse(BaseModel):
    """Error response."""

    detail: str = Field(description="Error message")


# --- Query Engine Singleton ---

_engine = None


def get_query_engine():
    """Get or create the query engine singleton."""
    global _engine
    if _engine is None:
        from repoindex.query import QueryEngine

        _engine = QueryEngine()
    return _engine


# --- FastAPI Application ---


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize query engine on startup."""
    get_query_engine()
    yield


app = FastAPI(
    title="RepoIndex API",
    description="""
**RepoIndex** - catalog of a repository's files, routes, schema and configuration.

## Features

- **Browse** - Page through indexed records, filtered by type and category
- **Search** - Case-insensitive substring search over names, descriptions, previews and paths
- **Detail** - Fetch a single record with its structured metadata
- **Statistics** - Record counts per type and category, total indexed size

## Authentication

This API runs locally and does not require authentication.
    """,
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Local use only
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- API Endpoints ---


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["System"],
    summary="Health check",
    description="Check if the API is running and the index is accessible.",
)
async def health_check() -> HealthResponse:
    """Check system health and configuration."""
    return HealthResponse(
        status="healthy",
        repository_root=str(REPOSITORY_ROOT),
        repository_exists=REPOSITORY_ROOT.exists(),
        index_exists=get_query_engine().store.exists,
    )


@app.get(
    "/repository",
    response_model=PageResponse,
    tags=["Repository"],
    summary="Browse indexed records",
    description="Paged listing ordered by type, category and name.",
    responses={500: {"model": ErrorResponse}},
)
async def list_repository(
    type: Annotated[str | None, Query(description="Exact record type")] = None,
    category: Annotated[str | None, Query(description="Exact category")] = None,
    search: Annotated[str | None, Query(description="Substring to search for")] = None,
    page: Annotated[int, Query(description="Page number", ge=1)] = 1,
) -> PageResponse:
    """Return one page of records matching the filters."""
    try:
        engine = get_query_engine()
        result = engine.list_records(
            type=type, category=category, search=search, page=page, per_page=PAGE_SIZE
        )
        return PageResponse(
            data=[RecordOut.from_record(r) for r in result.items],
            total=result.total,
            page=result.page,
            per_page=result.per_page,
            last_page=result.last_page,
            stats=StatsOut(**engine.stats()),
        )
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.get(
    "/repository/{record_id}",
    response_model=RecordOut,
    tags=["Repository"],
    summary="Get a record",
    description="Fetch a single record with its metadata.",
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_repository_record(record_id: str) -> RecordOut:
    """Return the record with the given id."""
    try:
        engine = get_query_engine()
        record = engine.get_record(record_id)
        if record is None:
            raise HTTPException(status_code=404, detail=f"Record not found: {record_id}")
        return RecordOut.from_record(record)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.get(
    "/api/repository",
    response_model=ApiResponse,
    tags=["Repository"],
    summary="Query records as JSON",
    description="Filtered records (no paging) together with index statistics.",
    responses={500: {"model": ErrorResponse}},
)
async def api_repository(
    type: Annotated[str | None, Query(description="Exact record type")] = None,
    category: Annotated[str | None, Query(description="Exact category")] = None,
    search: Annotated[str | None, Query(description="Substring to search for")] = None,
    limit: Annotated[int, Query(description="Maximum records to return", ge=1)] = API_LIMIT,
) -> ApiResponse:
    """Return up to ``limit`` matching records and the index statistics."""
    try:
        engine = get_query_engine()
        result = engine.list_records(
            type=type, category=category, search=search, page=1, per_page=limit
        )
        return ApiResponse(
            data=[RecordOut.from_record(r) for r in result.items],
            stats=StatsOut(**engine.stats()),
        )
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


# --- Server Runner ---


def run_server(host: str = "127.0.0.1", port: int = 8430) -> None:
    """Run the API server."""
    import uvicorn

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
