"""Catalog types - nodes, assets, attributes, relations, authorizations and export documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None."""
    return {k: v for k, v in data.items() if v is not None}


class NodeKind(str, Enum):
    """Kinds of hierarchy node in the catalog."""
    COMMUNITY = "community"
    DOMAIN = "domain"

    @property
    def resource_type(self) -> str:
        """Resource type name as the catalog service spells it."""
        return self.value.capitalize()


class AttributeKind(str, Enum):
    """Typed attribute groups, in their fixed emission order."""
    STRING = "string"
    BOOLEAN = "boolean"
    NUMERIC = "numeric"
    DATE = "date"
    MULTI_VALUE = "multiValue"


class RelationDirection(str, Enum):
    OUTGOING = "outgoing"
    INCOMING = "incoming"


class GroupingKey(str, Enum):
    """How assets are folded into domain groups."""
    NAME = "name"  # Domains sharing a name across communities are merged
    ID = "id"


@dataclass(frozen=True, slots=True)
class NodeRef:
    """Lightweight id/name reference to another node."""
    id: str | None = None
    name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"id": self.id, "name": self.name})


@dataclass(frozen=True, slots=True)
class Node:
    """
    A community or domain.

    The parent is a lookup key into the full node collection, never an
    owning link. For domains the parent is the owning community.
    """
    id: str
    name: str
    kind: NodeKind = NodeKind.COMMUNITY
    description: str | None = None
    parent: NodeRef | None = None
    type_name: str | None = None

    @property
    def parent_id(self) -> str | None:
        return self.parent.id if self.parent else None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def ref(self) -> NodeRef:
        return NodeRef(id=self.id, name=self.name)

    @classmethod
    def from_record(cls, record: dict[str, Any], kind: NodeKind = NodeKind.COMMUNITY) -> Node:
        """Build a node from a raw community or domain record."""
        parent_data = record.get("parent")
        if kind is NodeKind.DOMAIN:
            parent_data = record.get("community") or parent_data

        parent = None
        if parent_data and parent_data.get("id"):
            parent = NodeRef(id=parent_data["id"], name=parent_data.get("name"))

        return cls(
            id=record["id"],
            name=record.get("name", ""),
            kind=kind,
            description=record.get("description"),
            parent=parent,
            type_name=(record.get("type") or {}).get("name"),
        )


@dataclass(frozen=True, slots=True)
class Attribute:
    """One typed attribute value. ``kind`` always matches the shape of ``value``."""
    type_name: str | None
    value: Any
    kind: AttributeKind = AttributeKind.STRING

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "type": self.type_name,
            "value": self.value,
            "dataType": self.kind.value,
        })


@dataclass(frozen=True, slots=True)
class RelatedAsset:
    id: str | None = None
    display_name: str | None = None
    type_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "id": self.id,
            "displayName": self.display_name,
            "type": self.type_name,
        })


@dataclass(frozen=True, slots=True)
class Relation:
    """
    A relation seen from the exported asset.

    For outgoing relations ``relation_type`` is the forward role; for
    incoming ones it is the co-role, so the wording always reads from
    this asset's point of view.
    """
    direction: RelationDirection
    relation_type: str | None
    relation_type_reverse: str | None
    related_asset: RelatedAsset

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "direction": self.direction.value,
            "relationType": self.relation_type,
            "relationTypeReverse": self.relation_type_reverse,
            "relatedAsset": self.related_asset.to_dict(),
        })


@dataclass(frozen=True, slots=True)
class OwnerRef:
    """Unresolved owner: only kind and id are known."""
    kind: str | None = None
    id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"type": self.kind, "id": self.id})


@dataclass(frozen=True, slots=True)
class UserOwner:
    """Owner resolved to a full user identity."""
    id: str
    user_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    full_name: str | None = None
    email_address: str | None = None

    @property
    def kind(self) -> str:
        return "User"

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "type": self.kind,
            "id": self.id,
            "userName": self.user_name,
            "fullName": self.full_name,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "emailAddress": self.email_address,
        })


@dataclass(frozen=True, slots=True)
class GroupOwner:
    """Owner resolved to a user group."""
    id: str
    name: str | None = None
    description: str | None = None

    @property
    def kind(self) -> str:
        return "UserGroup"

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "type": self.kind,
            "id": self.id,
            "name": self.name,
            "description": self.description,
        })


Owner = OwnerRef | UserOwner | GroupOwner


@dataclass(frozen=True, slots=True)
class Authorization:
    """A role assigned to an owner, possibly inherited from an ancestor resource."""
    role: str | None = None
    owner: Owner | None = None
    base_resource_id: str | None = None
    base_resource_type: str | None = None
    base_resource_name: str | None = None

    def is_direct_for(self, asset_id: str) -> bool:
        return self.base_resource_id == asset_id

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "role": self.role,
            "owner": self.owner.to_dict() if self.owner else None,
            "baseResource": self.base_resource_name,
            "baseResourceId": self.base_resource_id,
            "baseResourceType": self.base_resource_type,
        })


@dataclass(frozen=True, slots=True)
class AuthorizationSummary:
    total: int = 0
    direct: int = 0
    inherited: int = 0
    from_community: int = 0
    from_domain: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "direct": self.direct,
            "inherited": self.inherited,
            "fromCommunity": self.from_community,
            "fromDomain": self.from_domain,
        }


@dataclass(frozen=True, slots=True)
class Authorizations:
    """
    Authorizations of one asset, partitioned by where they were granted.

    ``inherited`` holds every non-direct entry; ``from_community`` and
    ``from_domain`` are the subsets based on a community or a domain.
    Entries based on any other resource type only appear in ``inherited``.
    """
    all: tuple[Authorization, ...] = ()
    direct: tuple[Authorization, ...] = ()
    inherited: tuple[Authorization, ...] = ()
    from_community: tuple[Authorization, ...] = ()
    from_domain: tuple[Authorization, ...] = ()

    @property
    def summary(self) -> AuthorizationSummary:
        return AuthorizationSummary(
            total=len(self.all),
            direct=len(self.direct),
            inherited=len(self.inherited),
            from_community=len(self.from_community),
            from_domain=len(self.from_domain),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "direct": [a.to_dict() for a in self.direct],
            "inherited": {
                "fromCommunity": [a.to_dict() for a in self.from_community],
                "fromDomain": [a.to_dict() for a in self.from_domain],
            },
        }


@dataclass(frozen=True, slots=True)
class DomainRef:
    id: str | None = None
    name: str | None = None
    type_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"id": self.id, "name": self.name, "type": self.type_name})


@dataclass(frozen=True, slots=True)
class Asset:
    """
    A normalized asset.

    ``attributes`` and ``relations`` are left out of the serialized form
    when empty; ``authorizations`` is None unless enrichment ran.
    """
    id: str
    name: str | None = None
    display_name: str | None = None
    type_name: str | None = None
    status: str | None = None
    domain: DomainRef | None = None
    community: NodeRef | None = None
    tags: tuple[str, ...] = ()
    attributes: tuple[Attribute, ...] = ()
    relations: tuple[Relation, ...] = ()
    authorizations: Authorizations | None = None

    @property
    def has_attributes(self) -> bool:
        return len(self.attributes) > 0

    @property
    def has_relations(self) -> bool:
        return len(self.relations) > 0

    def to_dict(self) -> dict[str, Any]:
        data = _compact({
            "id": self.id,
            "name": self.name,
            "displayName": self.display_name,
            "type": self.type_name,
            "status": self.status,
            "domain": self.domain.to_dict() if self.domain else None,
            "community": self.community.to_dict() if self.community else None,
        })
        data["tags"] = list(self.tags)
        if self.attributes:
            data["attributes"] = [a.to_dict() for a in self.attributes]
        if self.relations:
            data["relations"] = [r.to_dict() for r in self.relations]
        if self.authorizations is not None:
            data["responsibilities"] = self.authorizations.to_dict()
        return data


@dataclass(slots=True)
class DomainGroup:
    """Assets exported for one domain, in harvest order."""
    id: str | None
    name: str | None
    community_name: str | None = None
    type_name: str | None = None
    description: str | None = None
    assets: list[Asset] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = _compact({
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type_name,
            "community": self.community_name,
        })
        data["assets"] = [a.to_dict() for a in self.assets]
        return data


@dataclass(frozen=True, slots=True)
class ExportTarget:
    """Metadata about what was exported and how."""
    kind: NodeKind
    name: str
    id: str | None = None
    description: str | None = None
    exported_at: str | None = None
    method: str | None = None
    includes_subcommunities: bool | None = None
    subcommunities: tuple[NodeRef, ...] = ()
    community: NodeRef | None = None  # Owning community of a domain target

    def to_dict(self) -> dict[str, Any]:
        data = _compact({
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "exportedAt": self.exported_at,
            "method": self.method,
            "includesSubcommunities": self.includes_subcommunities,
            "community": self.community.to_dict() if self.community else None,
        })
        if self.kind is NodeKind.COMMUNITY:
            data["subcommunities"] = [s.to_dict() for s in self.subcommunities]
        return data


@dataclass(frozen=True, slots=True)
class Statistics:
    total_communities: int = 0
    total_domains: int = 0
    total_assets: int = 0
    assets_with_attributes: int = 0
    assets_with_relations: int = 0

    @classmethod
    def compute(cls, total_communities: int, domains: list[DomainGroup]) -> Statistics:
        """Count everything by scanning the assembled domain groups once."""
        total_assets = 0
        with_attributes = 0
        with_relations = 0
        for group in domains:
            for asset in group.assets:
                total_assets += 1
                if asset.has_attributes:
                    with_attributes += 1
                if asset.has_relations:
                    with_relations += 1

        return cls(
            total_communities=total_communities,
            total_domains=len(domains),
            total_assets=total_assets,
            assets_with_attributes=with_attributes,
            assets_with_relations=with_relations,
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "totalCommunities": self.total_communities,
            "totalDomains": self.total_domains,
            "totalAssets": self.total_assets,
            "assetsWithAttributes": self.assets_with_attributes,
            "assetsWithRelations": self.assets_with_relations,
        }


@dataclass(slots=True)
class ExportDocument:
    """Everything exported for one target."""
    target: ExportTarget
    domains: list[DomainGroup] = field(default_factory=list)
    statistics: Statistics = field(default_factory=Statistics)

    def all_assets(self) -> Iterator[Asset]:
        for group in self.domains:
            yield from group.assets

    def to_dict(self) -> dict[str, Any]:
        return {
            self.target.kind.value: self.target.to_dict(),
            "domains": [d.to_dict() for d in self.domains],
            "statistics": self.statistics.to_dict(),
        }
