"""Error types raised by the tracking core."""

from typing import Optional


class CinetimeError(Exception):
    """Base class for all tracking errors."""


class ValidationError(CinetimeError):
    """Malformed episode identity or out-of-range value, rejected before storage."""


class NotFoundError(CinetimeError):
    """Targeted show or episode does not exist."""


class RecomputationFailure(CinetimeError):
    """Show aggregate recomputation failed.

    Never propagated to the writer that triggered it; logged with enough
    context to reconcile the show by hand.
    """

    def __init__(self, owner_id: str, catalog_id: int, reason: str):
        self.owner_id = owner_id
        self.catalog_id = catalog_id
        self.reason = reason
        super().__init__(
            f"Recomputation failed for owner={owner_id} show={catalog_id}: {reason}"
        )


class StoreUnavailable(CinetimeError):
    """Underlying persistence failure."""


class CatalogError(CinetimeError):
    """Catalog (TMDB) request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
