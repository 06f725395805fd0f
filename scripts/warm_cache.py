"""
Warm the enrichment caches and report how they fill up.

Fetches the trending list for every platform (and, optionally,
recommendations for a set of seed titles), enriches each with OMDb
metadata, then logs the cache performance summary.

Usage:
    python scripts/warm_cache.py
    python scripts/warm_cache.py --platforms Netflix,Hulu --count 20
    python scripts/warm_cache.py --seeds "Inception,The Dark Knight"
"""

import sys
from pathlib import Path

# Add parent directory to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import argparse
import logging
import time
from typing import List, Optional

from watchwise_service.clients import Platform
from watchwise_service.errors import RecommendationServiceError
from watchwise_service.services import CacheManager, EnrichmentService

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def warm(
        service: EnrichmentService,
        platforms: List[Platform],
        count: int,
        seeds: Optional[List[str]] = None
) -> dict:
    """
    Run one enrichment pass per platform and per seed set.

    Returns:
        Mapping of step name to number of enriched items (None on failure)
    """
    results = {}

    for platform in platforms:
        step = f"trending:{platform.value}"
        try:
            items = service.get_trending(platform, count)
            results[step] = len(items)
            with_metadata = sum(1 for item in items if item.metadata is not None)
            logger.info(f"✓ {platform.value}: {len(items)} titles, {with_metadata} with metadata")
        except (RecommendationServiceError, ValueError) as e:
            results[step] = None
            logger.error(f"✗ {platform.value}: {e}")

    if seeds:
        try:
            items = service.get_recommendations(seeds)
            results["recommendations"] = len(items)
            logger.info(f"✓ Recommendations for {', '.join(seeds)}: {len(items)} titles")
        except RecommendationServiceError as e:
            results["recommendations"] = None
            logger.error(f"✗ Recommendations: {e}")

    return results


def parse_platforms(value: str) -> List[Platform]:
    if value.lower() == 'all':
        return list(Platform)
    return [Platform.parse(p) for p in value.split(',') if p.strip()]


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function."""
    parser = argparse.ArgumentParser(
        description='Warm the metadata and recommendation caches'
    )
    parser.add_argument(
        '--platforms',
        type=str,
        default='all',
        help='Comma-separated platform names, or "all" (default: all)'
    )
    parser.add_argument(
        '--count',
        type=int,
        default=10,
        help='Trending titles per platform (default: 10)'
    )
    parser.add_argument(
        '--seeds',
        type=str,
        default=None,
        help='Comma-separated seed titles for a recommendations pass (default: skip)'
    )
    parser.add_argument(
        '--repeat',
        type=int,
        default=1,
        help='Number of passes; later passes should be served from cache (default: 1)'
    )

    args = parser.parse_args(argv)

    if args.count < 1:
        logger.error(f"--count must be at least 1, got {args.count}")
        return 1

    try:
        platforms = parse_platforms(args.platforms)
    except ValueError as e:
        logger.error(str(e))
        return 1

    seeds = [s.strip() for s in args.seeds.split(',') if s.strip()] if args.seeds else None

    cache_manager = CacheManager()
    service = EnrichmentService(*cache_manager.build_clients())

    logger.info("=" * 70)
    logger.info("WARMING ENRICHMENT CACHES")
    logger.info("=" * 70)

    failed = False
    for i in range(max(1, args.repeat)):
        start_time = time.time()
        results = warm(service, platforms, args.count, seeds)
        failed = failed or any(v is None for v in results.values())
        logger.info(f"Pass {i + 1} finished in {time.time() - start_time:.2f}s")

    cache_manager.log_performance_summary()
    return 1 if failed else 0


if __name__ == '__main__':
    sys.exit(main())
