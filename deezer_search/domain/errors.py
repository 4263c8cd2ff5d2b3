from typing import Optional


class CatalogError(Exception):
    """Catalog lookup failed. May declare the load type the host should see."""

    def __init__(self, message: str, load_type: Optional[str] = None) -> None:
        super().__init__(message)
        self.load_type = load_type


class RemoteFetchError(CatalogError):
    """Transport failure, non-success response or malformed catalog payload."""


class ValidationError(CatalogError):
    """A catalog track record is structurally defective (missing title or artist)."""


class ResolutionError(Exception):
    """An unresolved track could not be bound to a playable source."""
