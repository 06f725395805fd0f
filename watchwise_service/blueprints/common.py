"""Helpers and service objects shared by the HTTP blueprints."""
import json
from typing import List

import azure.functions as func

from watchwise_service.models.database import session_scope
from watchwise_service.repos import BookmarkRepository
from watchwise_service.services import CacheManager, EnrichmentService

# One cache set per worker process, shared by both clients
cache_manager = CacheManager()
enrichment_service = EnrichmentService(*cache_manager.build_clients())


def json_response(body, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(body, default=str),
        status_code=status_code,
        mimetype="application/json"
    )


def load_bookmarks(user_id: str) -> List[str]:
    """Bookmarked identifiers for a user, in insertion order."""
    with session_scope() as db:
        return BookmarkRepository(db).list_identifiers(user_id)
