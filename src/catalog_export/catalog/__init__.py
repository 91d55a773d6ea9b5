"""Catalog model - hierarchy nodes, normalized assets and export documents."""

from .types import (
    Asset,
    Attribute,
    AttributeKind,
    Authorization,
    Authorizations,
    DomainGroup,
    ExportDocument,
    ExportTarget,
    GroupingKey,
    Node,
    NodeKind,
    NodeRef,
    Relation,
    RelationDirection,
    Statistics,
)
from .registry import NodeRegistry, descendants_of
from .normalizer import RecordNormalizer
from .loader import ExportLoader, load_export

__all__ = [
    "Asset",
    "Attribute",
    "AttributeKind",
    "Authorization",
    "Authorizations",
    "DomainGroup",
    "ExportDocument",
    "ExportTarget",
    "GroupingKey",
    "Node",
    "NodeKind",
    "NodeRef",
    "Relation",
    "RelationDirection",
    "Statistics",
    "NodeRegistry",
    "descendants_of",
    "RecordNormalizer",
    "ExportLoader",
    "load_export",
]
