"""Bookmark endpoints."""
import azure.functions as func
import logging

from watchwise_service.blueprints.common import enrichment_service, json_response
from watchwise_service.models.database import session_scope
from watchwise_service.repos import BookmarkRepository

# Initialize blueprint
bp = func.Blueprint()

logger = logging.getLogger(__name__)

ACTIONS = ("add", "remove", "toggle")


@bp.route(route="users/{user_id}/bookmarks", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_bookmarks(req: func.HttpRequest) -> func.HttpResponse:
    """
    List a user's bookmarked identifiers.

    Query Parameters:
        - enriched: "true" to also return display cards built from OMDb metadata
    """
    user_id = req.route_params.get('user_id')
    if not user_id:
        return json_response({"error": "user_id is required"}, status_code=400)

    try:
        with session_scope() as db:
            bookmarks = BookmarkRepository(db).list_identifiers(user_id)

        body = {"bookmarkedMovies": bookmarks}
        if (req.params.get('enriched') or '').lower() == 'true':
            body["items"] = [card.to_dict() for card in enrichment_service.get_bookmarks(bookmarks)]

        return json_response(body)

    except Exception as e:
        logger.error(f"Get bookmarks error: {str(e)}", exc_info=True)
        return json_response({"error": "Internal server error"}, status_code=500)


@bp.route(route="users/{user_id}/bookmarks/{identifier}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def check_bookmark(req: func.HttpRequest) -> func.HttpResponse:
    """Tell whether one identifier is bookmarked."""
    user_id = req.route_params.get('user_id')
    identifier = req.route_params.get('identifier')
    if not user_id or not identifier:
        return json_response({"error": "user_id and identifier are required"}, status_code=400)

    try:
        with session_scope() as db:
            bookmarked = BookmarkRepository(db).is_bookmarked(user_id, identifier)
        return json_response({"identifier": identifier, "isBookmarked": bookmarked})

    except Exception as e:
        logger.error(f"Check bookmark error: {str(e)}", exc_info=True)
        return json_response({"error": "Internal server error"}, status_code=500)


@bp.route(route="users/{user_id}/bookmarks", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def update_bookmarks(req: func.HttpRequest) -> func.HttpResponse:
    """
    Add, remove or toggle a bookmark.

    Body:
        {"movieId": "<imdb id or title>", "action": "add" | "remove" | "toggle"}
    """
    user_id = req.route_params.get('user_id')
    if not user_id:
        return json_response({"error": "user_id is required"}, status_code=400)

    try:
        body = req.get_json()
    except ValueError:
        return json_response({"error": "Request body must be JSON"}, status_code=400)

    movie_id = body.get('movieId') if isinstance(body, dict) else None
    action = body.get('action') if isinstance(body, dict) else None

    if not isinstance(movie_id, str) or not movie_id.strip():
        return json_response({"error": "Validation failed", "details": "movieId is required"}, status_code=400)
    if action not in ACTIONS:
        return json_response(
            {"error": "Validation failed", "details": "action must be 'add', 'remove' or 'toggle'"},
            status_code=400
        )

    movie_id = movie_id.strip()
    try:
        with session_scope() as db:
            repo = BookmarkRepository(db)
            if action == "add":
                repo.add(user_id, movie_id)
                added = True
            elif action == "remove":
                repo.remove(user_id, movie_id)
                added = False
            else:
                added = repo.toggle(user_id, movie_id)

            bookmarks = repo.list_identifiers(user_id)

        return json_response({
            "message": f"Bookmark {'added' if added else 'removed'} successfully",
            "bookmarkedMovies": bookmarks
        })

    except Exception as e:
        logger.error(f"Update bookmarks error: {str(e)}", exc_info=True)
        return json_response({"error": "Internal server error"}, status_code=500)
