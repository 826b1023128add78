"""Domain errors raised by the service layer.

The HTTP layer maps each class to a status code in ``lavajato.main``.
"""


class LavajatoError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LavajatoError):
    """A referenced entity is missing or the request cannot be priced."""

    status_code = 400


class NotFoundError(LavajatoError):
    """The targeted resource does not exist (or is owned by someone else)."""

    status_code = 404


class AuthenticationError(LavajatoError):
    """Invalid verification code or bearer token."""

    status_code = 401
