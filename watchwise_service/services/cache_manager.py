"""Owns the caches shared by the metadata and recommendation clients."""
import logging
from typing import Dict, Optional, Tuple

from watchwise_service.cache import TTLCache
from watchwise_service.clients import MetadataClient, RecommendationClient
from watchwise_service.config import get_metadata_cache_ttl, get_recommendation_cache_ttl

logger = logging.getLogger(__name__)


class CacheManager:
    """
    One set of caches per application session.

    Clients built through `build_clients` share these instances, so
    clearing or inspecting them here covers every cached lookup.
    """

    def __init__(self, metadata_ttl: Optional[float] = None, recommendation_ttl: Optional[float] = None):
        self.metadata_ttl = metadata_ttl if metadata_ttl is not None else get_metadata_cache_ttl()
        self.recommendation_ttl = (
            recommendation_ttl if recommendation_ttl is not None else get_recommendation_cache_ttl()
        )

        self.omdb = TTLCache(default_ttl=self.metadata_ttl)
        self.omdb_batch = TTLCache(default_ttl=self.metadata_ttl)
        self.recommendations = TTLCache(default_ttl=self.recommendation_ttl)
        self.top_shows = TTLCache(default_ttl=self.recommendation_ttl)

    def build_clients(self, **client_kwargs) -> Tuple[MetadataClient, RecommendationClient]:
        """
        Create clients wired to this manager's caches.

        Keyword arguments prefixed with `metadata_` or `recommendation_` are
        passed (without the prefix) to the matching client.
        """
        metadata_kwargs = {
            k[len("metadata_"):]: v for k, v in client_kwargs.items() if k.startswith("metadata_")
        }
        recommendation_kwargs = {
            k[len("recommendation_"):]: v for k, v in client_kwargs.items() if k.startswith("recommendation_")
        }

        metadata_client = MetadataClient(
            cache=self.omdb,
            batch_cache=self.omdb_batch,
            ttl=self.metadata_ttl,
            **metadata_kwargs
        )
        recommendation_client = RecommendationClient(
            recommendations_cache=self.recommendations,
            top_shows_cache=self.top_shows,
            ttl=self.recommendation_ttl,
            **recommendation_kwargs
        )
        return metadata_client, recommendation_client

    def clear_all(self) -> None:
        for cache in (self.omdb, self.omdb_batch, self.recommendations, self.top_shows):
            cache.clear()
        logger.info("Cleared all caches")

    def get_all_stats(self) -> Dict:
        """Entry counts per cache plus swept sizes."""
        return {
            "omdb": self.omdb.get_stats().to_dict(),
            "ml": {
                "recommendations": self.recommendations.get_stats().to_dict(),
                "top_shows": self.top_shows.get_stats().to_dict(),
            },
            "sizes": {
                "omdb": {"omdb": self.omdb.size(), "batch": self.omdb_batch.size()},
                "ml": {"recommendations": self.recommendations.size(), "top_shows": self.top_shows.size()},
            },
        }

    def get_total_size(self) -> Dict[str, int]:
        omdb = self.omdb.size() + self.omdb_batch.size()
        ml = self.recommendations.size() + self.top_shows.size()
        return {"omdb": omdb, "ml": ml, "total": omdb + ml}

    def log_performance_summary(self) -> None:
        omdb = self.omdb.get_stats()
        recommendations = self.recommendations.get_stats()
        top_shows = self.top_shows.get_stats()
        sizes = self.get_total_size()

        logger.info("Cache Performance Summary:")
        logger.info("=" * 40)
        logger.info(f"OMDb cache: {omdb.valid} valid, {omdb.expired} expired")
        logger.info(f"ML recommendations: {recommendations.valid} valid, {recommendations.expired} expired")
        logger.info(f"ML top shows: {top_shows.valid} valid, {top_shows.expired} expired")
        logger.info(f"Total cached entries: {sizes['total']}")
        logger.info("=" * 40)
