"""Client for the OMDb movie metadata API"""
import logging
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Iterable, List, Optional, Tuple

import requests
from pydantic import ValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from watchwise_service.cache import TTLCache
from watchwise_service.config import (
    get_batch_max_workers,
    get_http_timeout,
    get_metadata_cache_ttl,
    get_omdb_api_key,
    get_omdb_base_url,
)
from watchwise_service.errors import MetadataLookupError
from watchwise_service.schemas import MetadataRecord

logger = logging.getLogger(__name__)

IMDB_ID_PATTERN = re.compile(r"^tt\d+$")


def is_imdb_id(value: str) -> bool:
    """True for IMDb identifiers such as 'tt1375666'."""
    return bool(IMDB_ID_PATTERN.match(value))


class MetadataClient:
    """
    Resolves titles or IMDb ids to OMDb records.

    Lookups never raise. Every outcome is cached, with a shorter TTL for
    "not found" answers and a shorter one still for transport or upstream
    errors, so failures are retried sooner than successes.
    """

    def __init__(
            self,
            api_key: Optional[str] = None,
            base_url: Optional[str] = None,
            cache: Optional[TTLCache] = None,
            batch_cache: Optional[TTLCache] = None,
            ttl: Optional[float] = None,
            not_found_ttl: Optional[float] = None,
            error_ttl: Optional[float] = None,
            timeout: Optional[float] = None,
            max_workers: Optional[int] = None,
    ):
        self.api_key = api_key or get_omdb_api_key()
        self.base_url = base_url or get_omdb_base_url()
        self.ttl = ttl if ttl is not None else get_metadata_cache_ttl()
        self.not_found_ttl = not_found_ttl if not_found_ttl is not None else self.ttl / 3
        self.error_ttl = error_ttl if error_ttl is not None else self.ttl / 10
        self.timeout = timeout if timeout is not None else get_http_timeout()
        self.max_workers = max_workers or get_batch_max_workers()

        self.cache = cache if cache is not None else TTLCache(default_ttl=self.ttl)
        self.batch_cache = batch_cache if batch_cache is not None else TTLCache(default_ttl=self.ttl)

        if not self.api_key:
            logger.warning("OMDb API key not configured; metadata lookups will return nothing")

        # Configure session with retries
        self.session = requests.Session()
        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504]
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        # noinspection HttpUrlsUsage
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    @staticmethod
    def cache_key(title_or_id: str) -> str:
        return title_or_id.strip().lower()

    @staticmethod
    def batch_key(keys: Iterable[str]) -> str:
        return "batch:" + "|".join(sorted(set(keys)))

    def fetch_one(self, title_or_id: str) -> Optional[MetadataRecord]:
        """
        Look up a single title or IMDb id.

        Returns:
            The metadata record, or None when it is unknown or unavailable
        """
        if not self.cache_key(title_or_id):
            return None

        record, _ = self._fetch(title_or_id)
        return record

    def fetch_batch(self, titles: Iterable[str]) -> List[Optional[MetadataRecord]]:
        """
        Look up several titles at once.

        Results line up with the input: index i holds the record for
        titles[i], or None. Titles already cached individually are not
        requested again, and the remaining ones are fetched concurrently.
        """
        titles = list(titles)
        if not titles:
            return []

        keys = [self.cache_key(title) for title in titles]
        batch_key = self.batch_key(keys)

        hit, cached_batch = self.batch_cache.lookup(batch_key)
        if hit:
            logger.debug(f"OMDb batch cache hit ({len(titles)} titles)")
            return [cached_batch.get(key) for key in keys]

        resolved: Dict[str, Optional[MetadataRecord]] = {}
        pending: Dict[str, str] = {}
        # The batch entry must not outlive any of its members
        batch_ttl = self.ttl
        for title, key in zip(titles, keys):
            if key in resolved or key in pending:
                continue
            if not key:
                resolved[key] = None
                continue
            hit, record = self.cache.lookup(key)
            if hit:
                resolved[key] = record
                if record is None:
                    # remaining lifetime unknown, assume the shortest
                    batch_ttl = min(batch_ttl, self.error_ttl)
            else:
                pending[key] = title

        if pending:
            logger.info(f"Fetching OMDb data for {len(pending)} of {len(titles)} titles")
            for key, (record, ttl) in self._fetch_concurrently(pending).items():
                resolved[key] = record
                batch_ttl = min(batch_ttl, ttl)

        self.batch_cache.set(batch_key, resolved, batch_ttl)

        return [resolved.get(key) for key in keys]

    def close(self) -> None:
        self.session.close()

    def _fetch(self, title_or_id: str) -> Tuple[Optional[MetadataRecord], float]:
        """Resolve one non-blank title through the cache; returns (record, ttl it was cached with)."""
        key = self.cache_key(title_or_id)

        hit, cached = self.cache.lookup(key)
        if hit:
            logger.debug(f"OMDb cache hit: {key}")
            return cached, self.ttl if cached is not None else self.error_ttl

        try:
            record = self._request(title_or_id.strip())
        except MetadataLookupError as e:
            if e.not_found:
                logger.warning(f"OMDb: {e} - {title_or_id}")
                ttl = self.not_found_ttl
            else:
                logger.error(f"Error fetching OMDb data for '{title_or_id}': {e}")
                ttl = self.error_ttl
            self.cache.set(key, None, ttl)
            return None, ttl

        self.cache.set(key, record, self.ttl)
        return record, self.ttl

    def _fetch_concurrently(self, pending: Dict[str, str]) -> Dict[str, Tuple[Optional[MetadataRecord], float]]:
        results: Dict[str, Tuple[Optional[MetadataRecord], float]] = {}
        workers = min(self.max_workers, len(pending))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_key = {
                executor.submit(self._fetch, title): key
                for key, title in pending.items()
            }
            for future in as_completed(future_to_key):
                key = future_to_key[future]
                try:
                    results[key] = future.result()
                except Exception as e:
                    logger.error(f"Unexpected error in batch lookup for '{key}': {e}", exc_info=True)
                    results[key] = (None, self.error_ttl)
        return results

    def _request(self, query: str) -> MetadataRecord:
        if not self.api_key:
            raise MetadataLookupError("OMDb API key not configured")

        params = {"apikey": self.api_key}
        params["i" if is_imdb_id(query) else "t"] = query

        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise MetadataLookupError(f"request failed: {e}") from e

        if response.status_code == 404:
            raise MetadataLookupError("Movie not found", not_found=True)
        if not response.ok:
            raise MetadataLookupError(f"OMDb API error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise MetadataLookupError("OMDb returned a non-JSON body") from e

        if not isinstance(data, dict):
            raise MetadataLookupError("OMDb returned an unexpected payload")

        if data.get("Response") == "False" or data.get("error"):
            message = data.get("Error") or data.get("error") or "Movie not found"
            raise MetadataLookupError(message, not_found=True)

        try:
            return MetadataRecord.model_validate(data)
        except ValidationError as e:
            raise MetadataLookupError(f"malformed OMDb record: {e.error_count()} errors") from e
