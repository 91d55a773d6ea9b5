"""HTTP catalog client over the REST 2.0 and structured query endpoints."""

from __future__ import annotations

import logging
from typing import Any, Iterable

import httpx

from ..auth.credentials import Credentials
from ..catalog.types import Node, NodeKind
from ..errors import QueryError, TransportError
from ..harvest import harvest_all
from ..query.filters import expr, merge, to_rest_params
from .base import CatalogClient, Filters

logger = logging.getLogger(__name__)

_LIST_DEFAULTS = {"sortField": "NAME", "sortOrder": "ASC", "excludeMeta": True}

_NODE_ENDPOINTS = {
    NodeKind.COMMUNITY: "/communities",
    NodeKind.DOMAIN: "/domains",
}


class HttpCatalogClient(CatalogClient):
    """
    Catalog client backed by ``httpx.AsyncClient``.

    Every transport problem (connection error, timeout, non-2xx status,
    unreadable body) is raised as :class:`TransportError` with the httpx
    exception chained.
    """

    def __init__(
        self,
        api_url: str,
        graph_url: str,
        credentials: Credentials | None = None,
        timeout: float = 30.0,
        verify: bool = True,
        page_size: int = 1000,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.graph_url = graph_url
        self.page_size = page_size

        headers = {"Accept": "application/json"}
        if credentials is not None:
            headers.update(credentials.headers())
            logger.debug("Using %s", credentials.describe())

        self._http = httpx.AsyncClient(
            headers=headers,
            timeout=timeout,
            verify=verify,
            transport=transport,
        )

    async def _request(
        self,
        method: str,
        url: str,
        endpoint: str,
        params: list[tuple[str, str]] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        logger.debug("%s %s %s", method, endpoint, params or "")
        try:
            response = await self._http.request(method, url, params=params, json=json_body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise TransportError(
                f"{method} {endpoint} failed with status {status}",
                endpoint=endpoint,
                status_code=status,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {endpoint} failed: {e}", endpoint=endpoint) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise TransportError(f"{method} {endpoint} returned invalid JSON", endpoint=endpoint) from e

        if not isinstance(payload, dict):
            raise TransportError(f"{method} {endpoint} returned an unexpected payload", endpoint=endpoint)
        return payload

    async def _list(
        self,
        endpoint: str,
        filters: Filters = None,
        offset: int = 0,
        limit: int = 1000,
        sorted_listing: bool = True,
    ) -> list[dict[str, Any]]:
        query = merge(
            expr(_LIST_DEFAULTS if sorted_listing else {}),
            expr(filters or {}),
            expr({"offset": offset, "limit": limit}),
        )
        payload = await self._request(
            "GET",
            f"{self.api_url}{endpoint}",
            endpoint,
            params=to_rest_params(query),
        )
        return payload.get("results") or []

    async def _harvest(self, endpoint: str, filters: Filters = None) -> list[dict[str, Any]]:
        return await harvest_all(
            lambda offset, limit: self._list(endpoint, filters, offset, limit, sorted_listing=False),
            self.page_size,
            label=endpoint,
        )

    async def list_nodes(
        self,
        kind: NodeKind,
        filters: Filters = None,
        offset: int = 0,
        limit: int = 1000,
    ) -> list[Node]:
        records = await self._list(_NODE_ENDPOINTS[kind], filters, offset, limit)
        return [Node.from_record(r, kind) for r in records]

    async def list_assets(
        self,
        filters: Filters = None,
        offset: int = 0,
        limit: int = 1000,
    ) -> list[dict[str, Any]]:
        return await self._list("/assets", filters, offset, limit)

    async def query_assets(self, query: str) -> list[dict[str, Any]]:
        payload = await self._request(
            "POST",
            self.graph_url,
            "graphql",
            json_body={"query": query, "variables": {}},
        )
        if payload.get("errors"):
            logger.error("Structured query failed: %s", payload["errors"])
            logger.debug("Query that caused the error:\n%s", query)
            raise QueryError("Structured asset query failed", errors=payload["errors"], endpoint="graphql")
        return (payload.get("data") or {}).get("assets") or []

    async def get_attributes(self, asset_id: str) -> list[dict[str, Any]]:
        return await self._harvest(f"/assets/{asset_id}/attributes")

    async def get_relations(self, asset_id: str) -> list[dict[str, Any]]:
        return await self._harvest(f"/assets/{asset_id}/relations")

    async def get_authorizations(
        self,
        resource_id: str,
        include_inherited: bool = True,
    ) -> list[dict[str, Any]]:
        return await self._harvest(
            "/responsibilities",
            {"resourceIds": resource_id, "includeInherited": include_inherited},
        )

    async def _resolve(self, endpoint: str, id_param: str, ids: Iterable[str]) -> list[dict[str, Any]]:
        ids = list(ids)
        records: list[dict[str, Any]] = []
        # One request per page-sized chunk of ids
        for start in range(0, len(ids), self.page_size):
            chunk = ids[start:start + self.page_size]
            records.extend(await self._list(endpoint, {id_param: chunk}, 0, self.page_size, sorted_listing=False))
        return records

    async def resolve_users(self, ids: Iterable[str]) -> list[dict[str, Any]]:
        return await self._resolve("/users", "userId", ids)

    async def resolve_groups(self, ids: Iterable[str]) -> list[dict[str, Any]]:
        return await self._resolve("/userGroups", "userGroupId", ids)

    async def verify(self) -> bool:
        """Probe connectivity and credentials with a one-item community listing."""
        await self._list("/communities", None, 0, 1)
        return True

    async def close(self) -> None:
        await self._http.aclose()
