"""
app/models/catalog_models.py

Pydantic models for movie records written to the catalog.

Only the fields search depends on are declared; anything else a record
carries (poster URLs, showtimes, episodes…) is kept as an extra field.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CatalogEntry(BaseModel):
    """A category or country reference embedded in a movie record."""

    id: Optional[str] = None
    name: str
    slug: Optional[str] = None


class ExternalRating(BaseModel):
    """Vote summary imported from the third-party metadata source."""

    model_config = ConfigDict(extra="allow")

    vote_average: float = 0.0
    vote_count: int = 0


class CatalogRecord(BaseModel):
    """A movie as stored in the catalog and mirrored into the search index."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: str
    origin_name: str = ""
    slug: str
    content: str = ""
    type: str = "series"
    status: str = "completed"
    quality: str = "FHD"
    lang: str = "Vietsub"
    year: Optional[int] = None
    view: int = 0
    is_copyright: bool = False
    chieurap: bool = False
    sub_docquyen: bool = False
    isHidden: bool = False
    actor: List[str] = Field(default_factory=list)
    director: List[str] = Field(default_factory=list)
    category: List[CatalogEntry] = Field(default_factory=list)
    country: List[CatalogEntry] = Field(default_factory=list)
    tmdb: ExternalRating = Field(default_factory=ExternalRating)
