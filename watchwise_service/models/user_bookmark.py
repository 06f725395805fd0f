"""A title bookmarked by a user."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Index, Integer, String

from watchwise_service.models.base import Base


class UserBookmark(Base):
    """A title bookmarked by a user.

    The identifier is an IMDb id when OMDb knew the title, else the title itself.
    """

    __tablename__ = "user_bookmarks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False)
    identifier = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index("idx_user_bookmark", "user_id", "identifier", unique=True),
    )

    def __repr__(self):
        return f"<UserBookmark(user_id='{self.user_id}', identifier='{self.identifier}')>"
