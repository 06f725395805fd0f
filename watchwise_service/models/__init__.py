"""SQLAlchemy models"""

from watchwise_service.models.base import Base
from watchwise_service.models.user_bookmark import UserBookmark

__all__ = [
    "Base",
    "UserBookmark",
]
