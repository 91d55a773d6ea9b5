"""Plain-text summaries of export documents and community hierarchies."""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from .catalog.registry import NodeRegistry
from .catalog.types import ExportDocument, Node, NodeKind


def summarize(document: ExportDocument) -> list[str]:
    """Summary lines for an export document."""
    target = document.target
    stats = document.statistics
    label = "Community" if target.kind is NodeKind.COMMUNITY else "Domain"

    lines = [
        f"{label}: {target.name}",
        f"  ID: {target.id or 'N/A'}",
    ]
    if target.description:
        lines.append(f"  Description: {target.description}")
    if target.community is not None:
        lines.append(f"  Community: {target.community.name}")
    lines.append(f"  Exported: {target.exported_at or 'unknown'}")
    if target.method:
        lines.append(f"  Method: {target.method}")
    if target.subcommunities:
        lines.append(f"  Subcommunities: {', '.join(s.name or s.id or '?' for s in target.subcommunities)}")

    lines += [
        "",
        "Statistics:",
        f"  Communities: {stats.total_communities}",
        f"  Domains: {stats.total_domains}",
        f"  Assets: {stats.total_assets}",
        f"  With attributes: {stats.assets_with_attributes}",
        f"  With relations: {stats.assets_with_relations}",
    ]

    if document.domains:
        lines += ["", "Domains:"]
        for group in document.domains:
            type_name = group.type_name or "N/A"
            lines.append(f"  {group.name} [{type_name}]: {len(group.assets)} assets")

    asset_types = Counter(a.type_name or "Unknown" for a in document.all_assets())
    if asset_types:
        lines += ["", "Asset types:"]
        for type_name, count in sorted(asset_types.items(), key=lambda item: (-item[1], item[0])):
            lines.append(f"  {type_name}: {count}")

    return lines


def render_hierarchy(nodes: Iterable[Node]) -> list[str]:
    """
    Indented tree of communities.

    Roots come first in listing order, each followed by its subtree.
    """
    registry = NodeRegistry(nodes)
    lines: list[str] = []

    for root in registry.roots():
        total = len(registry.descendants_of(root.id))
        suffix = f" ({total} subcommunities)" if total else ""
        lines.append(f"{root.name}{suffix}")

        # (node, depth, is_last) in display order
        stack = [(child, 1, i == 0) for i, child in enumerate(reversed(registry.children_of(root.id)))]
        seen = {root.id}
        while stack:
            node, depth, is_last = stack.pop()
            if node.id in seen:
                continue
            seen.add(node.id)
            branch = "└─ " if is_last else "├─ "
            lines.append("  " * (depth - 1) + branch + node.name)
            children = registry.children_of(node.id)
            stack.extend((child, depth + 1, i == 0) for i, child in enumerate(reversed(children)))

    return lines
