"""Structured asset query - query text and the predicates used by exports."""

from __future__ import annotations

from typing import Iterable

from .filters import FilterExpression, ObjectExpr, nested, to_query_language

_ATTRIBUTES_FRAGMENT = """
    stringAttributes {
      type { name }
      stringValue
    }
    booleanAttributes {
      type { name }
      booleanValue
    }
    numericAttributes {
      type { name }
      numericValue
    }
    dateAttributes {
      type { name }
      dateValue
    }
    multiValueAttributes {
      type { name }
      stringValues
    }"""

_RELATION_TYPE = """type {
        source { name }
        role
        target { name }
        corole
      }"""

_RELATIONS_FRAGMENT = f"""
    outgoingRelations {{
      target {{
        id
        displayName
        type {{ name }}
      }}
      {_RELATION_TYPE}
    }}
    incomingRelations {{
      source {{
        id
        displayName
        type {{ name }}
      }}
      {_RELATION_TYPE}
    }}"""


def build_assets_query(
    limit: int = 100,
    offset: int | None = None,
    where: FilterExpression | None = None,
    include_attributes: bool = True,
    include_relations: bool = True,
) -> str:
    """
    Render the asset listing query for one page.

    An offset of 0 is sent as ``null``, which the service treats as the
    first page.
    """
    offset_text = str(offset) if offset else "null"
    where_text = f", where: {to_query_language(where)}" if where is not None else ""
    attributes = _ATTRIBUTES_FRAGMENT if include_attributes else ""
    relations = _RELATIONS_FRAGMENT if include_relations else ""

    return f"""{{
  assets(limit: {limit}, offset: {offset_text}{where_text}) {{
    id
    displayName
    domain {{
      id
      name
      type {{ name }}
      parent {{
        id
        name
      }}
    }}
    type {{ name }}
    status {{ name }}
    tags {{ name }}{attributes}{relations}
  }}
}}"""


def domain_parent_in(community_ids: Iterable[str]) -> ObjectExpr:
    """Assets whose domain belongs to any of the given communities."""
    return nested("domain", "parent", "id", leaf={"in": list(community_ids)})


def domain_id_eq(domain_id: str) -> ObjectExpr:
    return nested("domain", "id", leaf={"eq": domain_id})


def domain_name_eq(domain_name: str) -> ObjectExpr:
    return nested("domain", "name", leaf={"eq": domain_name})
