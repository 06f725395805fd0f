"""Client for the ML recommendation service"""
import logging
from enum import Enum
from typing import Dict, Iterable, Optional

import requests
from pydantic import ValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from watchwise_service.cache import TTLCache
from watchwise_service.config import (
    get_http_timeout,
    get_recommendation_cache_ttl,
    get_recommendation_service_url,
)
from watchwise_service.errors import RecommendationServiceError
from watchwise_service.schemas import RecommendationResponse

logger = logging.getLogger(__name__)

DEFAULT_SEED_TITLES = ("The Office", "Friends", "Breaking Bad")

# Tuning parameters sent with every personalized request
N_RECOMMENDATIONS = 10
MIN_SIMILARITY = 0.1
DIVERSITY_WEIGHT = 0.3
COVERAGE_BOOST = 0.2


class Platform(str, Enum):
    """Streaming platforms offered to users, by display name."""
    NETFLIX = "Netflix"
    HULU = "Hulu"
    AMAZON_PRIME_VIDEO = "Amazon Prime Video"
    DISNEY_PLUS = "Disney+"

    @property
    def upstream_name(self) -> str:
        """The platform_filter value the recommendation service expects."""
        return PLATFORM_FILTERS[self]

    @classmethod
    def parse(cls, value: "str | Platform") -> "Platform":
        """Match a display name case-insensitively. Raises ValueError if unknown."""
        if isinstance(value, cls):
            return value
        for platform in cls:
            if platform.value.lower() == str(value).strip().lower():
                return platform
        options = ", ".join(p.value for p in cls)
        raise ValueError(f"Unknown platform '{value}'. Expected one of: {options}")


PLATFORM_FILTERS: Dict[Platform, str] = {
    Platform.NETFLIX: "Netflix",
    Platform.HULU: "Hulu",
    Platform.AMAZON_PRIME_VIDEO: "Prime Video",
    Platform.DISNEY_PLUS: "Disney+",
}


class RecommendationClient:
    """
    Fetches personalized and trending lists from the recommendation service.

    Successful responses are cached. Failures are not cached and are raised
    as RecommendationServiceError; callers decide how to degrade.
    """

    def __init__(
            self,
            base_url: Optional[str] = None,
            recommendations_cache: Optional[TTLCache] = None,
            top_shows_cache: Optional[TTLCache] = None,
            ttl: Optional[float] = None,
            timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or get_recommendation_service_url()).rstrip("/")
        self.ttl = ttl if ttl is not None else get_recommendation_cache_ttl()
        self.timeout = timeout if timeout is not None else get_http_timeout()

        self.recommendations_cache = (
            recommendations_cache if recommendations_cache is not None else TTLCache(default_ttl=self.ttl)
        )
        self.top_shows_cache = top_shows_cache if top_shows_cache is not None else TTLCache(default_ttl=self.ttl)

        # Configure session with retries
        self.session = requests.Session()
        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 502, 503, 504],
            allowed_methods=["GET", "POST"],
            raise_on_status=False
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        # noinspection HttpUrlsUsage
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    @staticmethod
    def recommendations_key(seed_titles: Iterable[str]) -> str:
        return "recs:" + "|".join(sorted(title.strip().lower() for title in seed_titles))

    @staticmethod
    def top_shows_key(platform: Platform, count: int) -> str:
        return f"top:{platform.value.lower()}:{count}"

    def fetch_recommendations(self, seed_titles: Optional[Iterable[str]] = None) -> RecommendationResponse:
        """
        Get personalized recommendations for a set of seed titles.

        Args:
            seed_titles: Titles the user likes (default: DEFAULT_SEED_TITLES)

        Returns:
            Validated recommendation response

        Raises:
            RecommendationServiceError: upstream failure or malformed payload
        """
        titles = [t.strip() for t in (seed_titles or DEFAULT_SEED_TITLES) if t and t.strip()]
        if not titles:
            titles = list(DEFAULT_SEED_TITLES)

        key = self.recommendations_key(titles)
        cached = self.recommendations_cache.get(key)
        if cached is not None:
            logger.debug(f"Recommendation cache hit: {key}")
            return cached

        payload = {
            "titles": titles,
            "n_recommendations": N_RECOMMENDATIONS,
            "min_similarity": MIN_SIMILARITY,
            "diversity_weight": DIVERSITY_WEIGHT,
            "coverage_boost": COVERAGE_BOOST,
        }
        logger.info(f"Requesting recommendations for {len(titles)} seed titles")
        result = self._send("POST", f"{self.base_url}/recommendations", json=payload)

        self.recommendations_cache.set(key, result, self.ttl)
        return result

    def fetch_top_shows(self, platform: "str | Platform" = Platform.NETFLIX, count: int = 10) -> RecommendationResponse:
        """
        Get the trending titles on a streaming platform.

        Args:
            platform: Display name, e.g. "Amazon Prime Video"
            count: Number of titles to return

        Raises:
            ValueError: unknown platform or non-positive count
            RecommendationServiceError: upstream failure or malformed payload
        """
        platform = Platform.parse(platform)
        if count < 1:
            raise ValueError("count must be at least 1")

        key = self.top_shows_key(platform, count)
        cached = self.top_shows_cache.get(key)
        if cached is not None:
            logger.debug(f"Top shows cache hit: {key}")
            return cached

        params = {"n_shows": count, "platform_filter": platform.upstream_name}
        logger.info(f"Requesting top {count} titles for {platform.value}")
        result = self._send("GET", f"{self.base_url}/recommendations", params=params)

        self.top_shows_cache.set(key, result, self.ttl)
        return result

    def close(self) -> None:
        self.session.close()

    def _send(self, method: str, url: str, **kwargs) -> RecommendationResponse:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Error contacting recommendation service: {e}")
            raise RecommendationServiceError(f"ML API request failed: {e}") from e

        if not response.ok:
            logger.error(f"Recommendation service returned {response.status_code}: {response.text[:200]}")
            raise RecommendationServiceError(
                f"ML API Error: {response.status_code}",
                status_code=response.status_code,
                body=response.text
            )

        try:
            return RecommendationResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Malformed recommendation payload: {e}")
            raise RecommendationServiceError(
                "ML API returned a malformed payload",
                status_code=response.status_code,
                body=response.text
            ) from e
