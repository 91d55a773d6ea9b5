"""
Filter expressions - typed predicate trees and their two wire syntaxes.

A filter is built from three node types:

- :class:`LiteralExpr` - string, number, boolean or null
- :class:`ListExpr` - ordered list of expressions
- :class:`ObjectExpr` - ordered ``key -> expression`` mapping

and serialized either as flat REST query parameters or as a structured
query input object, e.g. ``{domain: {parent: {id: {in: ["a", "b"]}}}}``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping
from urllib.parse import urlencode

Scalar = str | int | float | bool | None


class FilterSyntax(str, Enum):
    """Target wire syntax for a filter expression."""
    REST = "rest"      # key=value query parameters
    QUERY = "query"    # structured query input object


@dataclass(frozen=True, slots=True)
class LiteralExpr:
    value: Scalar = None


@dataclass(frozen=True, slots=True)
class ListExpr:
    items: tuple[FilterExpression, ...] = ()


@dataclass(frozen=True, slots=True)
class ObjectExpr:
    fields: tuple[tuple[str, FilterExpression], ...] = ()

    def get(self, key: str) -> FilterExpression | None:
        for name, value in self.fields:
            if name == key:
                return value
        return None

    def keys(self) -> list[str]:
        return [name for name, _ in self.fields]


FilterExpression = LiteralExpr | ListExpr | ObjectExpr


def expr(value: Any) -> FilterExpression:
    """
    Build a filter expression from plain Python data.

    Mappings keep their key order; lists and tuples become :class:`ListExpr`.
    Existing expressions are returned unchanged.
    """
    if isinstance(value, (LiteralExpr, ListExpr, ObjectExpr)):
        return value
    if value is None or isinstance(value, (str, bool, int, float)):
        return LiteralExpr(value)
    if isinstance(value, (list, tuple)):
        return ListExpr(tuple(expr(item) for item in value))
    if isinstance(value, Mapping):
        return ObjectExpr(tuple((str(k), expr(v)) for k, v in value.items()))
    raise TypeError(f"Unsupported filter value of type {type(value).__name__}: {value!r}")


def nested(*keys: str, leaf: Any) -> ObjectExpr:
    """
    Wrap ``leaf`` in one object per key, outermost first.

    ``nested("domain", "parent", "id", leaf={"in": ids})`` builds
    ``{domain: {parent: {id: {in: ids}}}}``.
    """
    if not keys:
        raise ValueError("nested() needs at least one key")
    node = expr(leaf)
    for key in reversed(keys):
        node = ObjectExpr(((key, node),))
    return node


def merge(*objects: ObjectExpr) -> ObjectExpr:
    """Concatenate the fields of several objects; later keys replace earlier ones in place."""
    merged: dict[str, FilterExpression] = {}
    for obj in objects:
        for key, value in obj.fields:
            merged[key] = value
    return ObjectExpr(tuple(merged.items()))


# ---------------------------------------------------------------------------
# Structured query syntax
# ---------------------------------------------------------------------------

def _quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _format_number(value: int | float) -> str:
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise ValueError(f"Cannot serialize non-finite number: {value}")
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def _format_literal(value: Scalar) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _format_number(value)
    return _quote(value)


def to_query_language(expression: FilterExpression) -> str:
    """Serialize to structured query syntax. Keys are emitted unquoted, in order."""
    if isinstance(expression, LiteralExpr):
        return _format_literal(expression.value)
    if isinstance(expression, ListExpr):
        return "[" + ", ".join(to_query_language(item) for item in expression.items) + "]"
    if isinstance(expression, ObjectExpr):
        fields = [f"{key}: {to_query_language(value)}" for key, value in expression.fields]
        return "{" + ", ".join(fields) + "}"
    raise TypeError(f"Not a filter expression: {expression!r}")


# ---------------------------------------------------------------------------
# REST parameter syntax
# ---------------------------------------------------------------------------

def _param_text(value: Scalar) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _format_number(value)
    return str(value)


def to_rest_params(expression: FilterExpression) -> list[tuple[str, str]]:
    """
    Flatten an object expression into ``(key, value)`` query parameters.

    Null values are skipped and list values repeat their key. REST
    parameters are flat, so nested objects are rejected.
    """
    if not isinstance(expression, ObjectExpr):
        raise ValueError("REST parameters must be built from an object expression")

    params: list[tuple[str, str]] = []
    for key, value in expression.fields:
        if isinstance(value, LiteralExpr):
            if value.value is not None:
                params.append((key, _param_text(value.value)))
        elif isinstance(value, ListExpr):
            for item in value.items:
                if not isinstance(item, LiteralExpr):
                    raise ValueError(f"REST parameter '{key}' can only repeat literal values")
                if item.value is not None:
                    params.append((key, _param_text(item.value)))
        else:
            raise ValueError(f"REST parameter '{key}' cannot hold a nested object")
    return params


def serialize(expression: FilterExpression | Mapping[str, Any], syntax: FilterSyntax = FilterSyntax.QUERY) -> str:
    """Serialize an expression (or plain mapping) in the requested syntax."""
    expression = expr(expression)
    if syntax is FilterSyntax.QUERY:
        return to_query_language(expression)
    if syntax is FilterSyntax.REST:
        return urlencode(to_rest_params(expression))
    raise ValueError(f"Unknown filter syntax: {syntax}")
