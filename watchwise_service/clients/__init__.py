"""Clients for the external metadata and recommendation services"""

from watchwise_service.clients.metadata_client import MetadataClient, is_imdb_id
from watchwise_service.clients.recommendation_client import Platform, RecommendationClient

__all__ = [
    "MetadataClient",
    "Platform",
    "RecommendationClient",
    "is_imdb_id",
]
