"""
Application Exceptions

Raised by the service layer and the route guards; the handlers registered
in ``menu_app.main`` turn the ones that escape a route into HTML responses.
"""

from typing import Optional


class MenuAppError(Exception):
    """Base class for errors with a user-facing message.

    Attributes:
        message: human-readable message shown on the rendered page
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500

    def __init__(self, message: str = "Something went wrong", http_status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if http_status is not None:
            self.http_status = http_status

    def __str__(self) -> str:
        return self.message


class FormValidationError(MenuAppError):
    """Raised when submitted form data is missing or invalid.

    Routes catch it and re-render the originating form with ``message``.
    """

    http_status = 400


class DuplicateError(FormValidationError):
    """Raised when a unique value (username, email, meal name) already exists."""


class ImageUploadError(FormValidationError):
    """Raised when the storage backend rejects or fails to store an image."""


class NotFoundError(MenuAppError):
    """Raised when an id does not resolve to a record."""

    http_status = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class ForbiddenError(MenuAppError):
    """Raised by a guard when the session user lacks a capability."""

    http_status = 403

    def __init__(self, message: str = "You do not have permission to view this page."):
        super().__init__(message)


class GuardRedirect(MenuAppError):
    """Raised by a guard to short-circuit the request with a redirect."""

    http_status = 303

    def __init__(self, location: str, message: str = "Redirect"):
        super().__init__(message)
        self.location = location
