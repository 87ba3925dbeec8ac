"""
Error taxonomy shared by services and routers.

Services raise these; the handlers registered in ``main`` turn them into
JSON error bodies.
"""


class InventoryError(Exception):
    """Base class for all application errors."""

    pass


class InputError(InventoryError):
    """Raised when a required field or file is missing or unusable (HTTP 400)."""

    pass


class BookValidationError(InputError):
    """Raised when a book record is missing its title or author."""

    pass


class UpstreamError(InventoryError):
    """Raised when the external AI model call fails (HTTP 500 with details)."""

    pass


class ParseError(UpstreamError):
    """Raised when the model response is not valid JSON."""

    pass


class StoreError(InventoryError):
    """Raised when a database operation fails (HTTP 500, generic message)."""

    pass
