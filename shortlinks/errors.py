"""Error taxonomy for the link shortener.

Every error the HTTP layer may show to a caller derives from
ShortLinkError and carries the status code it maps to. Anything else
raised inside a request is treated as a server error.
"""


class ShortLinkError(Exception):
    """Base class for errors with a caller-facing message."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ShortLinkError):
    """Malformed input, rejected before any store access."""

    status_code = 400


class ConflictError(ShortLinkError):
    """Slug or email already taken."""

    status_code = 400


class AuthError(ShortLinkError):
    """Missing, invalid or expired credential, or wrong password."""

    status_code = 401


class NotFoundError(ShortLinkError):
    """Unknown slug, or a resource the caller does not own."""

    status_code = 404


class ServerError(ShortLinkError):
    """Unexpected failure. The message is generic and safe to show."""

    status_code = 500


class DuplicateKeyError(Exception):
    """Raised by repositories when a unique constraint rejects a write.

    Args:
        field: Name of the violated unique field (e.g. "email", "short_slug")
    """

    def __init__(self, field: str):
        super().__init__(f"Duplicate value for unique field '{field}'")
        self.field = field
