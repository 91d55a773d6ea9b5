"""Shared fixtures: an in-memory catalog client and a small sample catalog."""

from __future__ import annotations

import re
from typing import Any, Iterable

import pytest

from catalog_export.catalog.types import Node, NodeKind, NodeRef
from catalog_export.client.base import CatalogClient
from catalog_export.query.filters import ObjectExpr, to_rest_params

_PAGE = re.compile(r"assets\(limit: (\d+), offset: (\w+)")
_PARENT_IN = re.compile(r"parent: \{id: \{in: \[([^\]]*)\]")
_DOMAIN_EQ = re.compile(r"domain: \{id: \{eq: \"([^\"]*)\"")


def community(node_id: str, name: str, parent: str | None = None, description: str | None = None) -> Node:
    return Node(
        id=node_id,
        name=name,
        kind=NodeKind.COMMUNITY,
        description=description,
        parent=NodeRef(id=parent) if parent else None,
    )


def domain(node_id: str, name: str, community_id: str, community_name: str | None = None,
           type_name: str = "Business Asset Domain") -> Node:
    return Node(
        id=node_id,
        name=name,
        kind=NodeKind.DOMAIN,
        parent=NodeRef(id=community_id, name=community_name),
        type_name=type_name,
    )


def query_asset(asset_id: str, domain_node: Node, community_name: str | None = None, **extra: Any) -> dict[str, Any]:
    """A structured-query asset record placed in ``domain_node``."""
    record = {
        "id": asset_id,
        "displayName": asset_id.upper(),
        "type": {"name": "Business Term"},
        "status": {"name": "Accepted"},
        "domain": {
            "id": domain_node.id,
            "name": domain_node.name,
            "type": {"name": domain_node.type_name},
            "parent": {"id": domain_node.parent_id, "name": community_name},
        },
        "tags": [],
    }
    record.update(extra)
    return record


class StubCatalogClient(CatalogClient):
    """
    Catalog client over in-memory records.

    Every call is appended to ``calls`` as ``(method, args)``. Setting
    ``failures[method]`` to an exception makes that method raise it.
    """

    def __init__(
        self,
        communities: Iterable[Node] = (),
        domains: Iterable[Node] = (),
        rest_assets: Iterable[dict[str, Any]] = (),
        graph_assets: Iterable[dict[str, Any]] = (),
        attributes: dict[str, list[dict[str, Any]]] | None = None,
        relations: dict[str, list[dict[str, Any]]] | None = None,
        authorizations: dict[str, list[dict[str, Any]]] | None = None,
        users: Iterable[dict[str, Any]] = (),
        groups: Iterable[dict[str, Any]] = (),
        page_size: int = 1000,
    ):
        self.communities = list(communities)
        self.domains = list(domains)
        self.rest_assets = list(rest_assets)
        self.graph_assets = list(graph_assets)
        self.attributes = attributes or {}
        self.relations = relations or {}
        self.authorizations = authorizations or {}
        self.users = list(users)
        self.groups = list(groups)
        self.page_size = page_size
        self.calls: list[tuple[str, Any]] = []
        self.failures: dict[str, Exception] = {}
        self.closed = False

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, args))
        if method in self.failures:
            raise self.failures[method]

    def called(self, method: str) -> list[tuple]:
        return [args for name, args in self.calls if name == method]

    @staticmethod
    def _filters(filters: Any) -> dict[str, Any]:
        if filters is None:
            return {}
        if isinstance(filters, ObjectExpr):
            return dict(to_rest_params(filters))
        return dict(filters)

    async def list_nodes(self, kind, filters=None, offset=0, limit=1000):
        self._record("list_nodes", kind, filters, offset, limit)
        wanted = self._filters(filters)
        nodes = self.communities if kind is NodeKind.COMMUNITY else self.domains
        if "name" in wanted:
            nodes = [n for n in nodes if n.name == wanted["name"]]
        if "communityId" in wanted:
            nodes = [n for n in nodes if n.parent_id == wanted["communityId"]]
        return nodes[offset:offset + limit]

    async def list_assets(self, filters=None, offset=0, limit=1000):
        self._record("list_assets", filters, offset, limit)
        wanted = self._filters(filters)
        records = self.rest_assets
        if "domainId" in wanted:
            records = [r for r in records if (r.get("domain") or {}).get("id") == wanted["domainId"]]
        return records[offset:offset + limit]

    async def query_assets(self, query):
        self._record("query_assets", query)
        limit_text, offset_text = _PAGE.search(query).groups()
        limit = int(limit_text)
        offset = 0 if offset_text == "null" else int(offset_text)

        records = self.graph_assets
        parent_in = _PARENT_IN.search(query)
        if parent_in:
            ids = re.findall(r'"([^"]*)"', parent_in.group(1))
            records = [r for r in records if r["domain"]["parent"]["id"] in ids]
        domain_eq = _DOMAIN_EQ.search(query)
        if domain_eq:
            records = [r for r in records if r["domain"]["id"] == domain_eq.group(1)]
        return records[offset:offset + limit]

    async def get_attributes(self, asset_id):
        self._record("get_attributes", asset_id)
        return list(self.attributes.get(asset_id, []))

    async def get_relations(self, asset_id):
        self._record("get_relations", asset_id)
        return list(self.relations.get(asset_id, []))

    async def get_authorizations(self, resource_id, include_inherited=True):
        self._record("get_authorizations", resource_id, include_inherited)
        return list(self.authorizations.get(resource_id, []))

    async def resolve_users(self, ids):
        ids = list(ids)
        self._record("resolve_users", ids)
        return [u for u in self.users if u["id"] in ids]

    async def resolve_groups(self, ids):
        ids = list(ids)
        self._record("resolve_groups", ids)
        return [g for g in self.groups if g["id"] in ids]

    async def close(self):
        self.closed = True


@pytest.fixture
def finance_catalog() -> StubCatalogClient:
    """
    Community Finance (c1) with subcommunity Payments (c2) and domain
    Glossary (d1) holding two assets: a1 with a string attribute, a2 with
    one outgoing relation and nothing else.
    """
    glossary = domain("d1", "Glossary", "c1", "Finance")
    return StubCatalogClient(
        communities=[
            community("c1", "Finance", description="Finance data"),
            community("c2", "Payments", parent="c1"),
            community("c9", "Marketing"),
        ],
        domains=[glossary],
        rest_assets=[
            {"id": "a1", "name": "Revenue", "displayName": "Revenue", "domain": {"id": "d1"},
             "type": {"name": "Business Term"}, "status": {"name": "Accepted"}},
            {"id": "a2", "name": "Margin", "displayName": "Margin", "domain": {"id": "d1"},
             "type": {"name": "Business Term"}, "status": {"name": "Candidate"}},
        ],
        graph_assets=[
            query_asset(
                "a1", glossary, "Finance",
                stringAttributes=[{"type": {"name": "Definition"}, "stringValue": "Money in"}],
            ),
            query_asset(
                "a2", glossary, "Finance",
                outgoingRelations=[{
                    "target": {"id": "a1", "displayName": "Revenue", "type": {"name": "Business Term"}},
                    "type": {"role": "uses", "corole": "used by"},
                }],
            ),
        ],
        attributes={
            "a1": [{"id": "at1", "type": {"name": "Definition"}, "value": "Money in",
                    "discriminator": "StringAttribute"}],
        },
        relations={
            "a2": [{"id": "r1", "source": {"id": "a2", "name": "Margin"},
                    "target": {"id": "a1", "name": "Revenue"},
                    "type": {"role": "uses", "coRole": "used by"}}],
        },
    )


@pytest.fixture
def fixed_clock():
    from datetime import datetime, timezone

    return lambda: datetime(2024, 1, 15, 10, 20, 30, 123000, tzinfo=timezone.utc)
