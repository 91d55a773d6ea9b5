"""Authorization enrichment - inheritance classification and owner resolution."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable

from .catalog.types import (
    Authorization,
    Authorizations,
    GroupOwner,
    NodeKind,
    Owner,
    OwnerRef,
    UserOwner,
)
from .client.base import CatalogClient
from .errors import CatalogError

logger = logging.getLogger(__name__)

USER = "User"
USER_GROUP = "UserGroup"


def full_name(user: dict[str, Any]) -> str | None:
    """``"first last"`` trimmed, falling back to the user name when blank."""
    name = f"{user.get('firstName') or ''} {user.get('lastName') or ''}".strip()
    return name or user.get("userName")


class AuthorizationEnricher:
    """
    Turns raw responsibility records into :class:`Authorizations`.

    Owners are resolved with one user batch and one group batch, issued
    concurrently. A failed batch only costs its enrichment: the affected
    owners stay as ``OwnerRef`` stubs and the export carries on.
    """

    def __init__(self, client: CatalogClient):
        self.client = client

    async def enrich(
        self,
        asset_id: str,
        raw_authorizations: Iterable[dict[str, Any]],
        include_inherited: bool = True,
    ) -> Authorizations:
        records = list(raw_authorizations)
        if not include_inherited:
            records = [r for r in records if (r.get("baseResource") or {}).get("id") == asset_id]

        user_ids, group_ids = self._owner_ids(records)
        # Both lookups always run to completion before an unexpected error surfaces
        outcomes = await asyncio.gather(
            self._resolve_batch("users", self.client.resolve_users, user_ids),
            self._resolve_batch("user groups", self.client.resolve_groups, group_ids),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        users, groups = outcomes

        authorizations = [self._authorization(r, users, groups) for r in records]
        return self.partition(asset_id, authorizations)

    @staticmethod
    def partition(asset_id: str, authorizations: Iterable[Authorization]) -> Authorizations:
        """Split authorizations by whether they were granted on the asset itself."""
        everything = tuple(authorizations)
        direct = tuple(a for a in everything if a.is_direct_for(asset_id))
        inherited = tuple(a for a in everything if not a.is_direct_for(asset_id))

        return Authorizations(
            all=everything,
            direct=direct,
            inherited=inherited,
            from_community=tuple(
                a for a in inherited if a.base_resource_type == NodeKind.COMMUNITY.resource_type
            ),
            from_domain=tuple(
                a for a in inherited if a.base_resource_type == NodeKind.DOMAIN.resource_type
            ),
        )

    def _owner_ids(self, records: list[dict[str, Any]]) -> tuple[list[str], list[str]]:
        user_ids: dict[str, None] = {}
        group_ids: dict[str, None] = {}
        for record in records:
            owner = record.get("owner") or {}
            owner_id = owner.get("id")
            if not owner_id:
                continue
            if owner.get("resourceType") == USER:
                user_ids[owner_id] = None
            elif owner.get("resourceType") == USER_GROUP:
                group_ids[owner_id] = None
        return list(user_ids), list(group_ids)

    async def _resolve_batch(
        self,
        label: str,
        lookup: Callable[[list[str]], Awaitable[list[dict[str, Any]]]],
        ids: list[str],
    ) -> dict[str, dict[str, Any]]:
        if not ids:
            return {}
        try:
            records = await lookup(ids)
        except CatalogError as e:
            logger.warning(f"Failed to resolve {len(ids)} {label}, keeping unresolved owners: {e}")
            return {}
        return {r["id"]: r for r in records if r.get("id")}

    def _authorization(
        self,
        record: dict[str, Any],
        users: dict[str, dict[str, Any]],
        groups: dict[str, dict[str, Any]],
    ) -> Authorization:
        base = record.get("baseResource") or {}
        owner = record.get("owner")
        return Authorization(
            role=(record.get("role") or {}).get("name"),
            owner=self._owner(owner, users, groups) if owner else None,
            base_resource_id=base.get("id"),
            base_resource_type=base.get("resourceType"),
            base_resource_name=base.get("name"),
        )

    def _owner(
        self,
        owner: dict[str, Any],
        users: dict[str, dict[str, Any]],
        groups: dict[str, dict[str, Any]],
    ) -> Owner:
        kind = owner.get("resourceType")
        owner_id = owner.get("id")

        if kind == USER and owner_id in users:
            user = users[owner_id]
            return UserOwner(
                id=owner_id,
                user_name=user.get("userName"),
                first_name=user.get("firstName"),
                last_name=user.get("lastName"),
                full_name=full_name(user),
                email_address=user.get("emailAddress"),
            )

        if kind == USER_GROUP and owner_id in groups:
            group = groups[owner_id]
            return GroupOwner(
                id=owner_id,
                name=group.get("name"),
                description=group.get("description"),
            )

        return OwnerRef(kind=kind, id=owner_id)
