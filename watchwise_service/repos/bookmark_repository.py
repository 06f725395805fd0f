"""Repository for user bookmarks."""

import logging

from sqlalchemy.orm import Session

from watchwise_service.models import UserBookmark

logger = logging.getLogger(__name__)


class BookmarkRepository:
    """
    Repository for user bookmarks.
    """

    def __init__(self, db: Session):
        self.db = db

    def _find(self, user_id: str, identifier: str) -> UserBookmark | None:
        return (
            self.db.query(UserBookmark)
            .filter(UserBookmark.user_id == user_id, UserBookmark.identifier == identifier)
            .first()
        )

    def add(self, user_id: str, identifier: str) -> bool:
        """
        Bookmark a title.

        Returns:
            True if added, False if it was already bookmarked
        """
        if self._find(user_id, identifier) is not None:
            return False

        self.db.add(UserBookmark(user_id=user_id, identifier=identifier))
        self.db.commit()
        logger.info(f"User {user_id} bookmarked {identifier}")
        return True

    def remove(self, user_id: str, identifier: str) -> bool:
        """
        Remove a bookmark.

        Returns:
            True if removed, False if not found
        """
        count = (
            self.db.query(UserBookmark)
            .filter(UserBookmark.user_id == user_id, UserBookmark.identifier == identifier)
            .delete()
        )
        self.db.commit()

        return count > 0

    # noinspection PyTypeChecker
    def list_identifiers(self, user_id: str) -> list[str]:
        """Bookmarked identifiers, oldest first."""
        result = (
            self.db.query(UserBookmark.identifier)
            .filter(UserBookmark.user_id == user_id)
            .order_by(UserBookmark.id)
            .all()
        )
        return [row[0] for row in result]

    def is_bookmarked(self, user_id: str, identifier: str) -> bool:
        return self._find(user_id, identifier) is not None

    def toggle(self, user_id: str, identifier: str) -> bool:
        """
        Flip a bookmark.

        Returns:
            True if the title is bookmarked afterwards
        """
        if self.remove(user_id, identifier):
            return False
        self.add(user_id, identifier)
        return True
