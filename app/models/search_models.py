"""
app/models/search_models.py

Pydantic DTOs for the public search flow — filters, hits and responses.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DurationBucket = Literal["short", "medium", "long"]


class SearchFilters(BaseModel):
    """
    Explicit filters supplied by the caller next to the free-text query.

    Blank strings coming from query parameters are treated as "not set".
    """

    category: Optional[str] = None
    country: Optional[str] = None
    year: Optional[int] = None
    type: Optional[str] = None
    status: Optional[str] = None
    duration: Optional[DurationBucket] = None
    search_description: bool = False
    is_hidden: Optional[bool] = None

    @field_validator("category", "country", "type", "status", "duration", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    def has_listing_filters(self) -> bool:
        """True when any filter that narrows the public listing is set."""
        return any(
            value is not None
            for value in (self.category, self.country, self.year, self.type, self.duration)
        )


class RankedHit(BaseModel):
    """
    One catalog record as returned by search.

    Every searchable field of the record is carried as an extra attribute;
    ``score`` and ``highlight`` are added by the backend that answered.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    score: float = 1.0
    highlight: Optional[Dict[str, List[str]]] = None


class SearchResult(BaseModel):
    """Backend-independent result of one search call."""

    hits: List[RankedHit] = Field(default_factory=list)
    total: int = 0
    max_score: float = 0.0


class SearchResponse(BaseModel):
    """
    Successful response for GET /search.

        { "success": true, "hits": [ ... ], "total": 12, "maxScore": 7.3 }
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    hits: List[RankedHit]
    total: int
    max_score: float = Field(alias="maxScore")


class SuggestionResponse(BaseModel):
    """
    Successful response for GET /search/suggestions.

        { "success": true, "suggestions": ["Avengers: Endgame", ...] }
    """

    success: bool = True
    suggestions: List[str]


class ErrorResponse(BaseModel):
    """Uniform error envelope shared by every endpoint."""

    success: bool = False
    message: str
    error: Optional[str] = None
