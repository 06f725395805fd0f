"""Validated shapes of upstream payloads and the view models built from them."""
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class RatingSource(BaseModel):
    """One entry of the OMDb `Ratings` list."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    source: str = Field(alias="Source")
    value: str = Field(alias="Value")


class MetadataRecord(BaseModel):
    """
    Movie/show metadata as returned by OMDb.

    Fields keep OMDb's names as aliases so raw payloads validate directly.
    Everything but the title is optional; OMDb uses "N/A" for unknown values
    and that string is kept as-is.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    title: str = Field(alias="Title")
    year: Optional[str] = Field(default=None, alias="Year")
    rated: Optional[str] = Field(default=None, alias="Rated")
    released: Optional[str] = Field(default=None, alias="Released")
    runtime: Optional[str] = Field(default=None, alias="Runtime")
    genre: Optional[str] = Field(default=None, alias="Genre")
    director: Optional[str] = Field(default=None, alias="Director")
    writer: Optional[str] = Field(default=None, alias="Writer")
    actors: Optional[str] = Field(default=None, alias="Actors")
    plot: Optional[str] = Field(default=None, alias="Plot")
    language: Optional[str] = Field(default=None, alias="Language")
    country: Optional[str] = Field(default=None, alias="Country")
    awards: Optional[str] = Field(default=None, alias="Awards")
    poster: Optional[str] = Field(default=None, alias="Poster")
    ratings: List[RatingSource] = Field(default_factory=list, alias="Ratings")
    metascore: Optional[str] = Field(default=None, alias="Metascore")
    imdb_rating: Optional[str] = Field(default=None, alias="imdbRating")
    imdb_votes: Optional[str] = Field(default=None, alias="imdbVotes")
    imdb_id: Optional[str] = Field(default=None, alias="imdbID")
    type: Optional[str] = Field(default=None, alias="Type")
    dvd: Optional[str] = Field(default=None, alias="DVD")
    box_office: Optional[str] = Field(default=None, alias="BoxOffice")
    production: Optional[str] = Field(default=None, alias="Production")
    website: Optional[str] = Field(default=None, alias="Website")


class RecommendationRecord(BaseModel):
    """A single title suggested by the recommendation service."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    title: str
    platform: str = ""
    type: str = ""
    similarity_score: float = 0.0
    genres: Union[str, List[str]] = ""
    release_year: Optional[int] = None
    rating: Optional[str] = None


class RecommendationResponse(BaseModel):
    """Body of both recommendation endpoints."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    recommendations: List[RecommendationRecord] = Field(default_factory=list)


@dataclass(frozen=True)
class EnrichedItem:
    """A recommendation paired with its metadata, if any was found."""
    recommendation: RecommendationRecord
    metadata: Optional[MetadataRecord] = None


@dataclass(frozen=True)
class DisplayCard:
    """Render-ready fields for one title."""
    title: str
    year: str
    rating: str
    category: str
    image_src: str
    identifier: str
    is_bookmarked: bool = False

    def to_dict(self) -> Dict:
        return asdict(self)
