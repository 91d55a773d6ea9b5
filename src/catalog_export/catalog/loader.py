"""Export loader - reads written export documents back from JSON/YAML files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from .types import (
    Asset,
    Attribute,
    AttributeKind,
    Authorization,
    Authorizations,
    DomainGroup,
    DomainRef,
    ExportDocument,
    ExportTarget,
    GroupOwner,
    NodeKind,
    NodeRef,
    Owner,
    OwnerRef,
    RelatedAsset,
    Relation,
    RelationDirection,
    Statistics,
    UserOwner,
)

logger = logging.getLogger(__name__)


class ExportLoader:
    """
    Loads export documents written by :class:`~catalog_export.writer.ExportWriter`.

    File format (abridged):
    ```json
    {
      "community": {"id": "c1", "name": "Finance", "exportedAt": "...", "subcommunities": []},
      "domains": [
        {"id": "d1", "name": "Glossary", "community": "Finance", "assets": [...]}
      ],
      "statistics": {"totalCommunities": 1, "totalDomains": 1, "totalAssets": 12, ...}
    }
    ```
    Domain exports use a ``domain`` root key instead of ``community``.
    """

    def load_file(self, path: str | Path) -> ExportDocument:
        """Load an export document from a JSON or YAML file."""
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Export file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)

        return self.load_dict(data or {})

    def load_dict(self, data: dict[str, Any]) -> ExportDocument:
        """Load an export document from a dictionary."""
        if NodeKind.DOMAIN.value in data and NodeKind.COMMUNITY.value not in data:
            kind = NodeKind.DOMAIN
        else:
            kind = NodeKind.COMMUNITY

        target = self._parse_target(kind, data.get(kind.value) or {})
        domains = [self._parse_domain(d) for d in data.get("domains", [])]
        statistics = self._parse_statistics(data.get("statistics") or {})

        logger.debug(f"Loaded export of {target.name} with {len(domains)} domains")
        return ExportDocument(target=target, domains=domains, statistics=statistics)

    def _parse_target(self, kind: NodeKind, data: dict[str, Any]) -> ExportTarget:
        community = data.get("community")
        return ExportTarget(
            kind=kind,
            name=data.get("name", ""),
            id=data.get("id"),
            description=data.get("description"),
            exported_at=data.get("exportedAt"),
            method=data.get("method"),
            includes_subcommunities=data.get("includesSubcommunities"),
            subcommunities=tuple(
                NodeRef(id=s.get("id"), name=s.get("name"))
                for s in data.get("subcommunities", [])
            ),
            community=NodeRef(id=community.get("id"), name=community.get("name")) if community else None,
        )

    def _parse_domain(self, data: dict[str, Any]) -> DomainGroup:
        return DomainGroup(
            id=data.get("id"),
            name=data.get("name"),
            community_name=data.get("community"),
            type_name=data.get("type"),
            description=data.get("description"),
            assets=[self._parse_asset(a) for a in data.get("assets", [])],
        )

    def _parse_asset(self, data: dict[str, Any]) -> Asset:
        domain = data.get("domain")
        community = data.get("community")
        responsibilities = data.get("responsibilities")

        return Asset(
            id=data["id"],
            name=data.get("name"),
            display_name=data.get("displayName"),
            type_name=data.get("type"),
            status=data.get("status"),
            domain=DomainRef(
                id=domain.get("id"),
                name=domain.get("name"),
                type_name=domain.get("type"),
            ) if domain else None,
            community=NodeRef(id=community.get("id"), name=community.get("name")) if community else None,
            tags=tuple(data.get("tags", [])),
            attributes=tuple(
                Attribute(
                    type_name=a.get("type"),
                    value=a.get("value"),
                    kind=AttributeKind(a.get("dataType", "string")),
                )
                for a in data.get("attributes", [])
            ),
            relations=tuple(self._parse_relation(r) for r in data.get("relations", [])),
            authorizations=self._parse_authorizations(responsibilities) if responsibilities else None,
        )

    def _parse_relation(self, data: dict[str, Any]) -> Relation:
        related = data.get("relatedAsset") or {}
        return Relation(
            direction=RelationDirection(data.get("direction", "outgoing")),
            relation_type=data.get("relationType"),
            relation_type_reverse=data.get("relationTypeReverse"),
            related_asset=RelatedAsset(
                id=related.get("id"),
                display_name=related.get("displayName"),
                type_name=related.get("type"),
            ),
        )

    def _parse_authorizations(self, data: dict[str, Any]) -> Authorizations:
        """
        Rebuild partitions from the written form.

        Entries inherited from resources other than communities and domains
        are not written out, so they are not recovered here.
        """
        inherited = data.get("inherited") or {}
        direct = tuple(self._parse_authorization(a) for a in data.get("direct", []))
        from_community = tuple(self._parse_authorization(a) for a in inherited.get("fromCommunity", []))
        from_domain = tuple(self._parse_authorization(a) for a in inherited.get("fromDomain", []))

        return Authorizations(
            all=direct + from_community + from_domain,
            direct=direct,
            inherited=from_community + from_domain,
            from_community=from_community,
            from_domain=from_domain,
        )

    def _parse_authorization(self, data: dict[str, Any]) -> Authorization:
        owner = data.get("owner")
        return Authorization(
            role=data.get("role"),
            owner=self._parse_owner(owner) if owner else None,
            base_resource_id=data.get("baseResourceId"),
            base_resource_type=data.get("baseResourceType"),
            base_resource_name=data.get("baseResource"),
        )

    def _parse_owner(self, data: dict[str, Any]) -> Owner:
        kind = data.get("type")
        if kind == "User":
            return UserOwner(
                id=data.get("id"),
                user_name=data.get("userName"),
                first_name=data.get("firstName"),
                last_name=data.get("lastName"),
                full_name=data.get("fullName"),
                email_address=data.get("emailAddress"),
            )
        if kind == "UserGroup":
            return GroupOwner(
                id=data.get("id"),
                name=data.get("name"),
                description=data.get("description"),
            )
        return OwnerRef(kind=kind, id=data.get("id"))

    def _parse_statistics(self, data: dict[str, Any]) -> Statistics:
        return Statistics(
            total_communities=data.get("totalCommunities", 0),
            total_domains=data.get("totalDomains", 0),
            total_assets=data.get("totalAssets", 0),
            assets_with_attributes=data.get("assetsWithAttributes", 0),
            assets_with_relations=data.get("assetsWithRelations", 0),
        )


def load_export(source: str | Path | dict) -> ExportDocument:
    """
    Convenience function to load an export document.

    Args:
        source: File path or already-parsed dictionary

    Returns:
        ExportDocument rebuilt from the written form
    """
    loader = ExportLoader()

    if isinstance(source, dict):
        return loader.load_dict(source)
    return loader.load_file(source)
