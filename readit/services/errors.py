"""Listing error taxonomy.

Services raise these; the FastAPI exception handlers registered in
``create_app`` are the only place they become HTTP responses.
"""


class ListingError(Exception):
    """Base class for recoverable listing errors."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequest(ListingError):
    """Conflicting or malformed pagination parameters."""


class InvalidCursor(BadRequest):
    """A cursor failed to decode or was issued for a different mode."""


class ScopeNotFound(ListingError):
    """The subreddit or post a listing is scoped to does not exist."""

    status_code = 404
