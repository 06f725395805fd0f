"""Service classes"""

from .cache_manager import CacheManager
from .enrichment_service import EnrichmentService

__all__ = ["CacheManager", "EnrichmentService"]
