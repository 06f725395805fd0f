"""Exceptions raised by the enrichment layer."""


class WatchWiseError(Exception):
    """Base class for service errors."""


class RecommendationServiceError(WatchWiseError):
    """
    Raised when the ML recommendation service fails.

    Carries the upstream HTTP status (None for transport failures) and the
    raw response body so callers can surface them for diagnostics.
    """

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self):
        base = super().__str__()
        if self.status_code is None:
            return base
        return f"{base} (status {self.status_code})"


class MetadataLookupError(WatchWiseError):
    """Raised inside the metadata client for a failed lookup. Never escapes it."""

    def __init__(self, message: str, not_found: bool = False):
        super().__init__(message)
        self.not_found = not_found
