"""Record normalizer - flattens raw asset payloads into :class:`Asset`."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from .types import (
    Asset,
    Attribute,
    AttributeKind,
    DomainRef,
    Node,
    NodeRef,
    RelatedAsset,
    Relation,
    RelationDirection,
)

logger = logging.getLogger(__name__)


# (payload group, value field, kind), in emission order
ATTRIBUTE_GROUPS: tuple[tuple[str, str, AttributeKind], ...] = (
    ("stringAttributes", "stringValue", AttributeKind.STRING),
    ("booleanAttributes", "booleanValue", AttributeKind.BOOLEAN),
    ("numericAttributes", "numericValue", AttributeKind.NUMERIC),
    ("dateAttributes", "dateValue", AttributeKind.DATE),
    ("multiValueAttributes", "stringValues", AttributeKind.MULTI_VALUE),
)

# REST attribute discriminators
_DISCRIMINATOR_KINDS: dict[str, AttributeKind] = {
    "StringAttribute": AttributeKind.STRING,
    "ScriptAttribute": AttributeKind.STRING,
    "SingleValueListAttribute": AttributeKind.STRING,
    "BooleanAttribute": AttributeKind.BOOLEAN,
    "NumericAttribute": AttributeKind.NUMERIC,
    "DateAttribute": AttributeKind.DATE,
    "MultiValueListAttribute": AttributeKind.MULTI_VALUE,
}


def _name_of(data: dict[str, Any] | None) -> str | None:
    return (data or {}).get("name")


def _kind_from_value(value: Any) -> AttributeKind:
    if isinstance(value, bool):
        return AttributeKind.BOOLEAN
    if isinstance(value, (int, float)):
        return AttributeKind.NUMERIC
    if isinstance(value, (list, tuple)):
        return AttributeKind.MULTI_VALUE
    return AttributeKind.STRING


def _unique_tags(tags: Iterable[Any]) -> tuple[str, ...]:
    names: list[str] = []
    for tag in tags:
        name = tag.get("name") if isinstance(tag, dict) else tag
        if name is not None and name not in names:
            names.append(name)
    return tuple(names)


class RecordNormalizer:
    """
    Converts raw asset records into the uniform :class:`Asset` shape.

    Two payload shapes are understood:

    - structured-query assets, where attributes arrive in five typed groups
      and relations are split into ``outgoingRelations``/``incomingRelations``
    - REST assets, with attribute and relation listings fetched separately

    Output ordering is deterministic: attributes follow group order (string,
    boolean, numeric, date, multi-value) then source order; outgoing relations
    precede incoming ones.
    """

    def normalize_asset(self, raw: dict[str, Any]) -> Asset:
        """Normalize a structured-query asset record."""
        domain_data = raw.get("domain") or {}
        community_data = domain_data.get("parent") or {}
        display_name = raw.get("displayName")

        return Asset(
            id=raw["id"],
            # Structured queries only expose displayName
            name=raw.get("name", display_name),
            display_name=display_name,
            type_name=_name_of(raw.get("type")),
            status=_name_of(raw.get("status")),
            domain=DomainRef(
                id=domain_data.get("id"),
                name=domain_data.get("name"),
                type_name=_name_of(domain_data.get("type")),
            ),
            community=NodeRef(
                id=community_data.get("id"),
                name=community_data.get("name"),
            ),
            tags=_unique_tags(raw.get("tags") or []),
            attributes=self.consolidate_attributes(raw),
            relations=self.consolidate_relations(raw),
        )

    def consolidate_attributes(self, raw: dict[str, Any]) -> tuple[Attribute, ...]:
        attributes: list[Attribute] = []
        for group, value_field, kind in ATTRIBUTE_GROUPS:
            for entry in raw.get(group) or []:
                value = entry.get(value_field)
                if kind is AttributeKind.MULTI_VALUE and value is None:
                    value = []
                attributes.append(Attribute(
                    type_name=_name_of(entry.get("type")),
                    value=value,
                    kind=kind,
                ))
        return tuple(attributes)

    def consolidate_relations(self, raw: dict[str, Any]) -> tuple[Relation, ...]:
        relations: list[Relation] = []

        for edge in raw.get("outgoingRelations") or []:
            relations.append(self._relation(edge, RelationDirection.OUTGOING, edge.get("target")))

        for edge in raw.get("incomingRelations") or []:
            relations.append(self._relation(edge, RelationDirection.INCOMING, edge.get("source")))

        return tuple(relations)

    def normalize_rest_asset(
        self,
        raw: dict[str, Any],
        attributes: list[dict[str, Any]] | None = None,
        relations: list[dict[str, Any]] | None = None,
        domain: Node | None = None,
        community: Node | None = None,
    ) -> Asset:
        """
        Normalize a REST asset record plus its separately fetched listings.

        ``domain`` and ``community`` fill in the asset's placement when the
        record itself only carries a bare domain reference.
        """
        domain_data = raw.get("domain") or {}
        if domain is not None:
            domain_ref = DomainRef(id=domain.id, name=domain.name, type_name=domain.type_name)
        else:
            domain_ref = DomainRef(id=domain_data.get("id"), name=domain_data.get("name"))

        community_ref = community.ref() if community is not None else None

        return Asset(
            id=raw["id"],
            name=raw.get("name"),
            display_name=raw.get("displayName"),
            type_name=_name_of(raw.get("type")),
            status=_name_of(raw.get("status")),
            domain=domain_ref,
            community=community_ref,
            tags=_unique_tags(raw.get("tags") or []),
            attributes=tuple(self._rest_attribute(a) for a in attributes or []),
            relations=self._rest_relations(raw["id"], relations or []),
        )

    def _relation(
        self,
        edge: dict[str, Any],
        direction: RelationDirection,
        related: dict[str, Any] | None,
    ) -> Relation:
        rel_type = edge.get("type") or {}
        role = rel_type.get("role")
        corole = rel_type.get("corole", rel_type.get("coRole"))
        if direction is RelationDirection.INCOMING:
            role, corole = corole, role

        related = related or {}
        return Relation(
            direction=direction,
            relation_type=role,
            relation_type_reverse=corole,
            related_asset=RelatedAsset(
                id=related.get("id"),
                display_name=related.get("displayName", related.get("name")),
                type_name=_name_of(related.get("type")),
            ),
        )

    def _rest_attribute(self, record: dict[str, Any]) -> Attribute:
        value = record.get("value")
        shape = _kind_from_value(value)
        kind = _DISCRIMINATOR_KINDS.get(record.get("discriminator", ""))
        # Shape wins over a missing or contradicting discriminator; dates
        # arrive as epoch numbers or strings
        if kind is None or (kind is not shape and kind is not AttributeKind.DATE):
            kind = shape
        if kind is AttributeKind.MULTI_VALUE:
            value = list(value)

        return Attribute(type_name=_name_of(record.get("type")), value=value, kind=kind)

    def _rest_relations(self, asset_id: str, records: list[dict[str, Any]]) -> tuple[Relation, ...]:
        outgoing: list[Relation] = []
        incoming: list[Relation] = []
        for record in records:
            source = record.get("source") or {}
            if source.get("id") == asset_id:
                outgoing.append(self._relation(record, RelationDirection.OUTGOING, record.get("target")))
            else:
                incoming.append(self._relation(record, RelationDirection.INCOMING, source))
        return tuple(outgoing + incoming)
