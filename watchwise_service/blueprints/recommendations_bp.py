"""Recommendation, trending and search endpoints."""
import azure.functions as func
import logging
from typing import Iterable, List, Optional

from watchwise_service.blueprints.common import cache_manager, enrichment_service, json_response, load_bookmarks
from watchwise_service.errors import RecommendationServiceError
from watchwise_service.schemas import EnrichedItem
from watchwise_service.services.enrichment import ContentType, to_display_card

# Initialize blueprint
bp = func.Blueprint()

logger = logging.getLogger(__name__)

MAX_TRENDING = 50


def _cards(items: Iterable[EnrichedItem], content_type: ContentType, bookmarks: Iterable[str]) -> List[dict]:
    bookmarked = set(bookmarks)
    return [
        to_display_card(item, content_type.category, bookmarked.__contains__).to_dict()
        for item in items
    ]


def _upstream_error(e: RecommendationServiceError) -> func.HttpResponse:
    return json_response(
        {
            "error": str(e),
            "upstream_status": e.status_code,
            "recommendations": []
        },
        status_code=502
    )


@bp.route(route="recommendations", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_recommendations(req: func.HttpRequest) -> func.HttpResponse:
    """
    Get personalized recommendations enriched with OMDb metadata.

    Query Parameters:
        - titles: Comma-separated seed titles (default: the user's bookmarks)
        - user_id: Marks bookmarked cards and seeds from bookmarks
        - type: all, movie or series (default: all)
    """
    try:
        try:
            content_type = ContentType.parse(req.params.get('type'))
        except ValueError as e:
            return json_response({"error": str(e)}, status_code=400)

        user_id: Optional[str] = req.params.get('user_id')
        bookmarks = load_bookmarks(user_id) if user_id else []

        titles_param = req.params.get('titles')
        if titles_param:
            seeds = [t.strip() for t in titles_param.split(',') if t.strip()]
        else:
            seeds = enrichment_service.resolve_seed_titles(bookmarks)

        try:
            items = enrichment_service.get_recommendations(seeds, content_type)
        except RecommendationServiceError as e:
            return _upstream_error(e)

        return json_response({
            "seed_titles": seeds,
            "count": len(items),
            "recommendations": _cards(items, content_type, bookmarks)
        })

    except Exception as e:
        logger.error(f"Error getting recommendations: {str(e)}", exc_info=True)
        return json_response({"error": "Internal server error"}, status_code=500)


@bp.route(route="trending", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_trending(req: func.HttpRequest) -> func.HttpResponse:
    """
    Get trending titles for a streaming platform.

    Query Parameters:
        - platform: Netflix, Hulu, Amazon Prime Video or Disney+ (default: Netflix)
        - n: Number of titles (default: 10, max: 50)
        - type: all, movie or series (default: all)
        - user_id: Marks bookmarked cards
    """
    try:
        platform = req.params.get('platform', 'Netflix')

        try:
            n = int(req.params.get('n', 10))
            content_type = ContentType.parse(req.params.get('type'))
        except ValueError as e:
            return json_response({"error": str(e)}, status_code=400)

        if n < 1 or n > MAX_TRENDING:
            return json_response({"error": f"n must be between 1 and {MAX_TRENDING}"}, status_code=400)

        user_id = req.params.get('user_id')
        bookmarks = load_bookmarks(user_id) if user_id else []

        try:
            items = enrichment_service.get_trending(platform, n, content_type)
        except ValueError as e:
            return json_response({"error": str(e)}, status_code=400)
        except RecommendationServiceError as e:
            return _upstream_error(e)

        return json_response({
            "platform": platform,
            "count": len(items),
            "recommendations": _cards(items, content_type, bookmarks)
        })

    except Exception as e:
        logger.error(f"Error getting trending titles: {str(e)}", exc_info=True)
        return json_response({"error": "Internal server error"}, status_code=500)


@bp.route(route="search", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def search_title(req: func.HttpRequest) -> func.HttpResponse:
    """
    Look up a single title or IMDb id.

    Query Parameters:
        - q: Title or IMDb id (required)
        - user_id: Marks the card if bookmarked
    """
    try:
        query = (req.params.get('q') or '').strip()
        if not query:
            return json_response({"error": "q is required"}, status_code=400)

        item = enrichment_service.search(query)
        if item is None:
            return json_response({"error": f'No results found for "{query}"'}, status_code=404)

        user_id = req.params.get('user_id')
        bookmarks = load_bookmarks(user_id) if user_id else []

        return json_response({
            "query": query,
            "result": _cards([item], ContentType.ALL, bookmarks)[0]
        })

    except Exception as e:
        logger.error(f"Error searching titles: {str(e)}", exc_info=True)
        return json_response({"error": "Internal server error"}, status_code=500)


# noinspection PyUnusedLocal
@bp.route(route="cache/stats", methods=["GET"])
def get_cache_stats(req: func.HttpRequest) -> func.HttpResponse:
    """
    Get statistics about the enrichment caches.
    """
    try:
        return json_response({
            "stats": cache_manager.get_all_stats(),
            "totals": cache_manager.get_total_size()
        })

    except Exception as e:
        logger.error(f"Error getting cache stats: {str(e)}", exc_info=True)
        return json_response({"error": "Internal server error"}, status_code=500)


# noinspection PyUnusedLocal
@bp.route(route="cache/clear", methods=["POST"])
def clear_cache(req: func.HttpRequest) -> func.HttpResponse:
    """Drop every cached lookup."""
    cache_manager.clear_all()
    return json_response({"message": "Caches cleared"})


# noinspection PyUnusedLocal
@bp.route(route="health", methods=["GET"])
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint."""
    return json_response({
        "status": "healthy",
        "service": "watchwise-service",
        "version": "1.0.0"
    })
