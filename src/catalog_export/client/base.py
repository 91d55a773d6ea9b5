"""Abstract catalog API client."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping

from ..catalog.types import Node, NodeKind
from ..harvest import harvest_all
from ..query.filters import ObjectExpr

logger = logging.getLogger(__name__)

Filters = Mapping[str, Any] | ObjectExpr | None


class CatalogClient(ABC):
    """
    Operations the export pipeline needs from the catalog service.

    Listing methods take ``offset``/``limit`` and return one page;
    :meth:`all_nodes` and :meth:`all_assets` harvest every page.
    Failures surface as :class:`~catalog_export.errors.TransportError`.
    """

    page_size: int = 1000

    @abstractmethod
    async def list_nodes(
        self,
        kind: NodeKind,
        filters: Filters = None,
        offset: int = 0,
        limit: int = 1000,
    ) -> list[Node]:
        """List one page of communities or domains."""
        ...

    @abstractmethod
    async def list_assets(
        self,
        filters: Filters = None,
        offset: int = 0,
        limit: int = 1000,
    ) -> list[dict[str, Any]]:
        """List one page of REST asset records."""
        ...

    @abstractmethod
    async def query_assets(self, query: str) -> list[dict[str, Any]]:
        """Run one page of a structured asset query."""
        ...

    @abstractmethod
    async def get_attributes(self, asset_id: str) -> list[dict[str, Any]]:
        ...

    @abstractmethod
    async def get_relations(self, asset_id: str) -> list[dict[str, Any]]:
        ...

    @abstractmethod
    async def get_authorizations(
        self,
        resource_id: str,
        include_inherited: bool = True,
    ) -> list[dict[str, Any]]:
        """Responsibilities on a resource, optionally including inherited ones."""
        ...

    @abstractmethod
    async def resolve_users(self, ids: Iterable[str]) -> list[dict[str, Any]]:
        """Full user records for a batch of user ids."""
        ...

    @abstractmethod
    async def resolve_groups(self, ids: Iterable[str]) -> list[dict[str, Any]]:
        """Full user group records for a batch of group ids."""
        ...

    async def all_nodes(self, kind: NodeKind, filters: Filters = None) -> list[Node]:
        """Every community or domain matching ``filters``."""
        return await harvest_all(
            lambda offset, limit: self.list_nodes(kind, filters, offset, limit),
            self.page_size,
            label=f"{kind.value} records",
        )

    async def all_assets(self, filters: Filters = None) -> list[dict[str, Any]]:
        """Every REST asset record matching ``filters``."""
        return await harvest_all(
            lambda offset, limit: self.list_assets(filters, offset, limit),
            self.page_size,
            label="assets",
        )

    async def find_node_by_name(self, kind: NodeKind, name: str) -> Node | None:
        """First community or domain with exactly this name, or None."""
        nodes = await self.list_nodes(
            kind,
            {"name": name, "nameMatchMode": "EXACT"},
            0,
            self.page_size,
        )
        for node in nodes:
            if node.name == name:
                return node
        return None

    async def close(self) -> None:
        """Release any underlying resources."""

    async def __aenter__(self) -> CatalogClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
