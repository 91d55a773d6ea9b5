"""Exception types raised by the export pipeline."""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for catalog export errors."""


class ConfigError(CatalogError):
    """Configuration is missing or unusable."""


class TransportError(CatalogError):
    """
    A call to the catalog service failed.

    The original exception (if any) is chained as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code


class QueryError(TransportError):
    """A structured query came back with an ``errors`` payload."""

    def __init__(self, message: str, errors: list | None = None, endpoint: str | None = None):
        super().__init__(message, endpoint=endpoint)
        self.errors = errors or []


class NotFoundError(CatalogError):
    """A named community or domain does not exist in the catalog."""

    def __init__(self, kind: str, name: str):
        super().__init__(f"{kind.capitalize()} \"{name}\" not found")
        self.kind = kind
        self.name = name
