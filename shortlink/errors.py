"""
Error types for the short link service.

Every error raised by the service layer carries the HTTP status the terminal
error responder should use. Storage-level errors are kept separate so the
storage backends stay free of HTTP concerns.
"""


class LinkServiceError(Exception):
    """Base error; `status_code` defaults to 500 unless a subclass sets it."""

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(LinkServiceError):
    """Raised when the request body fails field validation."""

    status_code = 400


class NotFoundError(LinkServiceError):
    """Raised when a slug does not exist."""

    status_code = 404

    def __init__(self, message: str = "Link not found"):
        super().__init__(message)


class ConflictError(LinkServiceError):
    """Raised when a slug is already taken."""

    status_code = 409

    def __init__(self, message: str = "Slug is taken"):
        super().__init__(message)


class DuplicateSlugError(Exception):
    """Raised by a storage backend when its unique constraint on slug is violated."""

    def __init__(self, slug: str, detail: str = ""):
        super().__init__(detail or f"duplicate slug: {slug!r}")
        self.slug = slug
