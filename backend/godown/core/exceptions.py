"""
Domain exceptions raised by the service layer.

Each exception carries the HTTP status the routers answer with.
"""


class InventoryError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(InventoryError):
    """Malformed id, out-of-range number, missing field, structural violation."""

    status_code = 400


class ConflictError(InventoryError):
    """Explicit id or unique value already taken."""

    status_code = 400


class AuthorizationError(InventoryError):
    """Entity exists but belongs to another user."""

    status_code = 403


class NotFoundError(InventoryError):
    """Referenced entity does not exist."""

    status_code = 404
