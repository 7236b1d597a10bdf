"""Response DTOs for the HTTP endpoint and the cache tools."""

from typing import Any

from pydantic import BaseModel, Field

from crypto_expert.entities import ContentSearchResult, SearchHit, UpsertResult


class SearchHitItem(BaseModel):
    """Single hit in a content search response."""

    id: str = Field(..., description="Entry id")
    score: float = Field(..., description="Similarity score (1 = identical)", ge=0.0, le=1.0)
    metadata: dict[str, Any] = Field(default_factory=dict, description="Stored entry fields")

    @classmethod
    def from_entity(cls, hit: SearchHit) -> "SearchHitItem":
        return cls(id=hit.id, score=hit.score, metadata=dict(hit.metadata))


class ContentSearchResponse(BaseModel):
    """Response DTO for check_existing_content.

    ``threshold`` is advisory metadata; results below it are not removed.
    """

    found: bool
    count: int = Field(..., ge=0)
    results: list[SearchHitItem] = Field(default_factory=list)
    topic: str
    threshold: float

    @classmethod
    def from_entity(cls, result: ContentSearchResult) -> "ContentSearchResponse":
        return cls(
            found=result.found,
            count=result.count,
            results=[SearchHitItem.from_entity(hit) for hit in result.results],
            topic=result.topic,
            threshold=result.threshold,
        )


class ContentUpsertResponse(BaseModel):
    """Response DTO for upsert_content."""

    success: bool
    id: str
    topic: str
    content_length: int
    timestamp: str

    @classmethod
    def from_entity(cls, result: UpsertResult) -> "ContentUpsertResponse":
        return cls(
            success=result.success,
            id=result.id,
            topic=result.topic,
            content_length=result.content_length,
            timestamp=result.timestamp,
        )


class QueryResponse(BaseModel):
    """Response DTO for a successful POST /query."""

    success: bool = True
    query: str
    response: str
    timestamp: str


class ErrorResponse(BaseModel):
    """Error body shared by every failing endpoint."""

    success: bool = False
    error: str
    message: str


class HealthResponse(BaseModel):
    status: str = Field(..., description="'OK' when the server is up")
    message: str
