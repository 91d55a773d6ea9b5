"""Query construction - filter expressions and structured asset queries."""

from .filters import (
    FilterExpression,
    FilterSyntax,
    ListExpr,
    LiteralExpr,
    ObjectExpr,
    expr,
    merge,
    nested,
    serialize,
    to_query_language,
    to_rest_params,
)
from .assets import build_assets_query, domain_id_eq, domain_name_eq, domain_parent_in

__all__ = [
    "FilterExpression",
    "FilterSyntax",
    "ListExpr",
    "LiteralExpr",
    "ObjectExpr",
    "expr",
    "merge",
    "nested",
    "serialize",
    "to_query_language",
    "to_rest_params",
    "build_assets_query",
    "domain_id_eq",
    "domain_name_eq",
    "domain_parent_in",
]
