"""Error taxonomy shared by catalog, client and library modules."""

from __future__ import annotations

from collections.abc import Mapping


class CatalogError(Exception):
    """Base class for every error raised by maktaba."""


class ValidationError(CatalogError, ValueError):
    """Caller supplied a bad category, id, page size or action."""


class InvalidCategoryError(ValidationError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Invalid category: {name!r}")
        self.name = name


class NotFoundError(CatalogError, LookupError):
    """Requested item, scholar or section does not exist."""


class StorageError(CatalogError, RuntimeError):
    """One category store failed; distinct from a store that returned nothing."""

    def __init__(self, category: str, message: str) -> None:
        super().__init__(f"{category}: {message}")
        self.category = category


class TotalSourceFailure(CatalogError, RuntimeError):
    """Every category failed during a federated call."""

    def __init__(self, failures: Mapping[str, str]) -> None:
        details = "; ".join(f"{name}: {reason}" for name, reason in failures.items())
        super().__init__(f"All content sources are unavailable ({details})" if details else "All content sources are unavailable")
        self.failures = dict(failures)
