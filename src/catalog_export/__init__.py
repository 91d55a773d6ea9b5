"""Catalog export - materializes catalog communities and domains as JSON documents."""

from .catalog import ExportDocument, Node, NodeKind, RecordNormalizer, descendants_of, load_export
from .authorizations import AuthorizationEnricher
from .client import CatalogClient, HttpCatalogClient
from .errors import CatalogError, ConfigError, NotFoundError, QueryError, TransportError
from .exporter import ExportAssembler, ExportMethod, ExportOptions, ExportResult
from .harvest import harvest_all
from .query import FilterSyntax, serialize
from .writer import ExportWriter

__version__ = "0.1.0"

__all__ = [
    "ExportDocument",
    "Node",
    "NodeKind",
    "RecordNormalizer",
    "descendants_of",
    "load_export",
    "AuthorizationEnricher",
    "CatalogClient",
    "HttpCatalogClient",
    "CatalogError",
    "ConfigError",
    "NotFoundError",
    "QueryError",
    "TransportError",
    "ExportAssembler",
    "ExportMethod",
    "ExportOptions",
    "ExportResult",
    "harvest_all",
    "FilterSyntax",
    "serialize",
    "ExportWriter",
]
