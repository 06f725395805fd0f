"""Service that builds enriched recommendation and trending lists."""
import logging
import re
from typing import Iterable, List, Optional

from watchwise_service.clients import MetadataClient, Platform, RecommendationClient, is_imdb_id
from watchwise_service.clients.recommendation_client import DEFAULT_SEED_TITLES
from watchwise_service.schemas import DisplayCard, EnrichedItem, RecommendationRecord, RecommendationResponse
from watchwise_service.services.enrichment import MOVIE, TV_SERIES, ContentType, merge, to_bookmark_card

logger = logging.getLogger(__name__)

_LEADING_YEAR = re.compile(r"^\d{4}")


class EnrichmentService:
    """
    Combines the recommendation service with OMDb metadata.

    Metadata is cosmetic: a missing record only drops posters and ratings.
    Recommendation failures propagate as RecommendationServiceError.
    """

    def __init__(
            self,
            metadata_client: Optional[MetadataClient] = None,
            recommendation_client: Optional[RecommendationClient] = None
    ):
        self.metadata_client = metadata_client or MetadataClient()
        self.recommendation_client = recommendation_client or RecommendationClient()

    def resolve_seed_titles(self, identifiers: Optional[Iterable[str]]) -> List[str]:
        """
        Turn bookmark identifiers into seed titles.

        IMDb ids are looked up and replaced by their title (or kept as-is if
        the lookup fails); anything else is already a title.
        """
        identifiers = [i for i in (identifiers or []) if i]
        if not identifiers:
            return list(DEFAULT_SEED_TITLES)

        titles = []
        for identifier in identifiers:
            if is_imdb_id(identifier):
                record = self.metadata_client.fetch_one(identifier)
                titles.append(record.title if record else identifier)
            else:
                titles.append(identifier)
        return titles

    def get_recommendations(
            self,
            seed_titles: Optional[Iterable[str]] = None,
            content_type: ContentType = ContentType.ALL
    ) -> List[EnrichedItem]:
        """Personalized recommendations for the seeds, enriched and filtered."""
        response = self.recommendation_client.fetch_recommendations(seed_titles)
        return self._enrich(response, content_type)

    def get_trending(
            self,
            platform: "str | Platform" = Platform.NETFLIX,
            count: int = 10,
            content_type: ContentType = ContentType.ALL
    ) -> List[EnrichedItem]:
        """Trending titles on a platform, enriched and filtered."""
        response = self.recommendation_client.fetch_top_shows(platform, count)
        return self._enrich(response, content_type)

    def search(self, query: str) -> Optional[EnrichedItem]:
        """
        Look up one title directly in OMDb.

        The recommendation half of the result is built from the metadata so
        it renders like any other item.
        """
        record = self.metadata_client.fetch_one(query)
        if record is None:
            return None

        year_match = _LEADING_YEAR.match(record.year or "")
        recommendation = RecommendationRecord(
            title=record.title,
            platform="Search",
            type=MOVIE if record.type == "movie" else TV_SERIES,
            similarity_score=1.0,
            genres=record.genre or "",
            release_year=int(year_match.group()) if year_match else None,
            rating=record.rated or None,
        )
        return EnrichedItem(recommendation=recommendation, metadata=record)

    def get_bookmarks(self, identifiers: Iterable[str]) -> List[DisplayCard]:
        """
        Display cards for a user's bookmarks, in bookmark order.

        IMDb ids are first resolved to titles, then all titles are looked up
        in one batch. Every card is marked as bookmarked.
        """
        identifiers = [i for i in identifiers if i]
        if not identifiers:
            return []

        titles = self.resolve_seed_titles(identifiers)
        metadata = self.metadata_client.fetch_batch(titles)

        logger.info(
            f"Loaded {len(identifiers)} bookmarks "
            f"({sum(1 for m in metadata if m is not None)} with metadata)"
        )
        return [to_bookmark_card(identifier, record) for identifier, record in zip(identifiers, metadata)]

    def _enrich(self, response: RecommendationResponse, content_type: ContentType) -> List[EnrichedItem]:
        recommendations = response.recommendations
        # Titles must stay in recommendation order for the positional merge
        titles = [rec.title for rec in recommendations]
        metadata = self.metadata_client.fetch_batch(titles)

        enriched = merge(recommendations, metadata, content_type.content_filter)
        logger.info(
            f"Enriched {len(enriched)} of {len(recommendations)} titles "
            f"({sum(1 for m in metadata if m is not None)} with metadata)"
        )
        return enriched
