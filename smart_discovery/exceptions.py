"""Exceptions raised by the recommendation engine."""


class DiscoveryError(Exception):
    """Base exception for recommendation errors."""

    pass


class CatalogError(DiscoveryError):
    """Catalog lookup error."""

    pass


class CatalogRequestError(CatalogError):
    """A single catalog request failed."""

    def __init__(self, path: str, message: str, status_code: int | None = None) -> None:
        self.path = path
        self.status_code = status_code
        super().__init__(f"{path}: {message}")


class CatalogUnavailableError(CatalogError):
    """Every upstream catalog request failed."""

    pass


class CacheKeyError(DiscoveryError):
    """Preferences or library snapshot could not be serialized into a cache key."""

    pass
