"""Error taxonomy raised by the catalog services.

Every error carries a human readable ``message``; ``ValidationError`` also
carries one entry per violated rule in ``errors``.
"""

from typing import List, Optional


class CatalogError(Exception):
    """Base class for catalog errors."""

    status_code = 400

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.message = message
        self.errors = list(errors or [])
        super().__init__(message)


class ValidationError(CatalogError):
    """Request violates structural or business rules. Nothing was applied."""

    status_code = 400

    def __init__(self, errors: List[str], message: str = "Validation failed."):
        super().__init__(message, errors)


class ConflictError(CatalogError):
    """Request is well formed but conflicts with the product's current state."""

    status_code = 409


class NotFoundError(CatalogError):
    status_code = 404


class PersistenceError(CatalogError):
    """The atomic commit failed and was rolled back."""

    status_code = 500
