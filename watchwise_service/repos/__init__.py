"""Repository classes"""

from watchwise_service.repos.bookmark_repository import BookmarkRepository

__all__ = [
    "BookmarkRepository",
]
