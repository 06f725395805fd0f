"""Join recommendation lists with OMDb metadata into display-ready items."""
from dataclasses import replace
from enum import Enum
from typing import Callable, List, Optional, Sequence

from watchwise_service.schemas import DisplayCard, EnrichedItem, MetadataRecord, RecommendationRecord

ContentFilter = Callable[[EnrichedItem], bool]

MOVIE = "Movie"
TV_SERIES = "TV Series"
SERIES_TYPES = {"TV Series", "TV Show"}


def content_kind(item: EnrichedItem) -> Optional[str]:
    """
    "movie", "series" or None for anything else.

    The OMDb Type decides when metadata carries one; the recommendation's
    type is only consulted without it.
    """
    if item.metadata is not None and item.metadata.type:
        kind = item.metadata.type.lower()
        return kind if kind in ("movie", "series") else None
    if item.recommendation.type == MOVIE:
        return "movie"
    if item.recommendation.type in SERIES_TYPES:
        return "series"
    return None


def is_movie(item: EnrichedItem) -> bool:
    return content_kind(item) == "movie"


def is_series(item: EnrichedItem) -> bool:
    return content_kind(item) == "series"


class ContentType(str, Enum):
    """Content selectors accepted by the listing endpoints."""
    ALL = "all"
    MOVIE = "movie"
    SERIES = "series"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ContentType":
        if not value:
            return cls.ALL
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"type must be one of: {', '.join(c.value for c in cls)}") from None

    @property
    def content_filter(self) -> Optional[ContentFilter]:
        return {ContentType.MOVIE: is_movie, ContentType.SERIES: is_series}.get(self)

    @property
    def category(self) -> Optional[str]:
        return {ContentType.MOVIE: MOVIE, ContentType.SERIES: TV_SERIES}.get(self)


def merge(
        recommendations: Sequence[RecommendationRecord],
        metadata: Sequence[Optional[MetadataRecord]],
        content_filter: Optional[ContentFilter] = None
) -> List[EnrichedItem]:
    """
    Pair recommendations with metadata by position.

    metadata[i] must be the lookup result for recommendations[i].title, so
    the batch lookup has to be given titles in recommendation order.

    Args:
        recommendations: Records from the recommendation service
        metadata: Matching batch lookup results (None where nothing was found)
        content_filter: Optional predicate deciding which items to keep

    Returns:
        Enriched items in recommendation order

    Raises:
        ValueError: if the two sequences differ in length
    """
    if len(recommendations) != len(metadata):
        raise ValueError(
            f"Cannot merge {len(recommendations)} recommendations with {len(metadata)} metadata results"
        )

    enriched = [
        EnrichedItem(recommendation=recommendation, metadata=record)
        for recommendation, record in zip(recommendations, metadata)
    ]

    if content_filter is not None:
        enriched = [item for item in enriched if content_filter(item)]

    return enriched


def to_display_card(
        item: EnrichedItem,
        category_override: Optional[str] = None,
        is_bookmarked: Optional[Callable[[str], bool]] = None
) -> DisplayCard:
    """Resolve display fields, preferring OMDb values over recommendation values."""
    rec = item.recommendation
    meta = item.metadata

    title = (meta.title if meta else None) or rec.title
    year = (
        (meta.year if meta else None)
        or (str(rec.release_year) if rec.release_year is not None else None)
        or "Unknown"
    )
    rating = (meta.rated if meta else None) or rec.rating or "Not Rated"
    category = category_override or (MOVIE if rec.type == MOVIE else TV_SERIES)

    poster = meta.poster if meta else None
    image_src = poster if poster and poster != "N/A" else ""

    # Bookmarks are keyed by IMDb id when known, else by title
    identifier = (meta.imdb_id if meta else None) or title

    return DisplayCard(
        title=title,
        year=year,
        rating=rating,
        category=category,
        image_src=image_src,
        identifier=identifier,
        is_bookmarked=bool(is_bookmarked(identifier)) if is_bookmarked else False,
    )


def to_bookmark_card(identifier: str, metadata: Optional[MetadataRecord]) -> DisplayCard:
    """
    Card for a bookmarked title.

    The stored identifier stays the card's identifier (it is what the
    bookmark store knows), and the title falls back to it when no metadata
    was found. Category follows the OMDb Type.
    """
    is_film = metadata is not None and (metadata.type or "").lower() == "movie"
    item = EnrichedItem(
        recommendation=RecommendationRecord(title=identifier, type=MOVIE if is_film else TV_SERIES),
        metadata=metadata,
    )
    return replace(to_display_card(item), identifier=identifier, is_bookmarked=True)
