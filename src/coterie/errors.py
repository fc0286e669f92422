from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Document not found") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when there is no valid session behind a request.

    The response never reveals which step failed (missing cookie, unknown or
    expired session, deleted member, wrong password).
    """

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class AccessDeniedError(UserError):
    """Raised when an authenticated member is not permitted to do something.

    Covers pending members, non-admins and failed CSRF checks alike.
    """

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class ConflictError(UserError):
    """Raised when a unique attribute (email, username) is already taken."""


class ValidationError(UserError):
    """Raised when user input or a business rule check fails."""


class IntegrationError(Exception):
    """Raised by external-system adapters. Logged, never shown to the user."""


class LoginRedirect(Exception):  # noqa: N818
    """Control flow for browser routes: send the client to the login page."""

    def __init__(self, return_to: str) -> None:
        super().__init__(return_to)
        self.return_to = return_to
