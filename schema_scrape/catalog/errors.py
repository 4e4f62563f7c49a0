"""Errors raised by catalog discovery and reconciliation."""

from typing import Optional


class MissingRequiredParameter(ValueError):
    """Raised when a mandatory identifier such as creator or location is empty."""

    def __init__(self, parameter: str):
        self.parameter = parameter
        super().__init__(f"Required parameter '{parameter}' was not supplied")


class CatalogQueryFailure(RuntimeError):
    """Raised when a catalog connection or query fails."""

    def __init__(self, message: str, query: Optional[str] = None):
        self.query = query
        super().__init__(message)


class UnknownCatalogTable(CatalogQueryFailure):
    """Raised when a query names a table the catalog does not expose."""


def require(parameter: str, value: Optional[str]) -> str:
    """Return ``value`` or raise MissingRequiredParameter if it is blank."""
    if value is None or not str(value).strip():
        raise MissingRequiredParameter(parameter)
    return value
