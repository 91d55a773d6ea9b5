"""
Export assembler - builds export documents for communities and domains.

Two assembly methods are supported:

- ``graphql``: one structured asset query, paged to exhaustion, filtered on
  the scope's community ids; domains appear in first-encountered order and
  only when they hold assets.
- ``rest``: walk the scope community by community, list each community's
  domains and harvest each domain's assets, fetching attributes and
  relations per asset.

Either way statistics are computed from the finished document, never
tracked while assembling.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterable

from .authorizations import AuthorizationEnricher
from .catalog.normalizer import RecordNormalizer
from .catalog.registry import NodeRegistry
from .catalog.types import (
    Asset,
    DomainGroup,
    ExportDocument,
    ExportTarget,
    GroupingKey,
    Node,
    NodeKind,
    NodeRef,
    Statistics,
)
from .client.base import CatalogClient
from .errors import ConfigError, NotFoundError
from .harvest import harvest_all
from .query.assets import build_assets_query, domain_id_eq, domain_parent_in
from .query.filters import FilterExpression

if TYPE_CHECKING:
    from .config import ExportConfig
    from .writer import ExportWriter

logger = logging.getLogger(__name__)


class ExportMethod(str, Enum):
    """How assets are pulled from the catalog."""
    GRAPHQL = "graphql"
    REST = "rest"

    @property
    def label(self) -> str:
        return "GraphQL" if self is ExportMethod.GRAPHQL else "REST"


@dataclass
class ExportOptions:
    """Caller-selected options for one export run."""
    method: ExportMethod = ExportMethod.GRAPHQL
    include_subcommunities: bool = True
    include_assets: bool = True  # REST method only
    include_attributes: bool = True
    include_relations: bool = True
    include_responsibilities: bool = False
    include_inherited: bool = True
    group_domains_by: GroupingKey = GroupingKey.NAME

    def __post_init__(self) -> None:
        self.method = ExportMethod(self.method)
        self.group_domains_by = GroupingKey(self.group_domains_by)

    @classmethod
    def from_config(cls, config: ExportConfig) -> ExportOptions:
        try:
            method = ExportMethod(str(config.method).lower())
        except ValueError:
            raise ConfigError(f"Unknown export method '{config.method}'") from None
        try:
            grouping = GroupingKey(str(config.group_domains_by).lower())
        except ValueError:
            raise ConfigError(f"Unknown domain grouping key '{config.group_domains_by}'") from None

        return cls(
            method=method,
            include_subcommunities=config.include_subcommunities,
            include_assets=config.include_assets,
            include_attributes=config.include_attributes,
            include_relations=config.include_relations,
            include_responsibilities=config.include_responsibilities,
            include_inherited=config.include_inherited,
            group_domains_by=grouping,
        )

    def updated(self, overrides: dict[str, Any]) -> ExportOptions:
        """Copy with some options replaced. Unknown option names raise ValueError."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown export options: {', '.join(sorted(unknown))}")
        return replace(self, **overrides)


@dataclass
class ExportResult:
    """Outcome of exporting one target in a multi-target run."""
    target: str
    success: bool
    path: Path | None = None
    document: ExportDocument | None = field(default=None, repr=False)
    error: str | None = None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _timestamp(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ExportAssembler:
    """
    Builds :class:`ExportDocument` objects from a :class:`CatalogClient`.

    I/O is sequential except for the owner lookups inside authorization
    enrichment. Any collaborator failure aborts the current target.
    """

    def __init__(
        self,
        client: CatalogClient,
        normalizer: RecordNormalizer | None = None,
        enricher: AuthorizationEnricher | None = None,
        query_page_size: int = 100,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.client = client
        self.normalizer = normalizer or RecordNormalizer()
        self.enricher = enricher or AuthorizationEnricher(client)
        self.query_page_size = query_page_size
        self.clock = clock

    # -----------------------------------------------------------------------
    # Targets
    # -----------------------------------------------------------------------

    async def export_community(
        self,
        community: Node | str,
        options: ExportOptions | None = None,
    ) -> ExportDocument:
        """Export a community, and its subcommunities unless disabled."""
        options = options or ExportOptions()
        root = await self._lookup(NodeKind.COMMUNITY, community)
        logger.info(f"Exporting community: {root.name} (via {options.method.label})")

        descendants: list[Node] = []
        if options.include_subcommunities:
            descendants = await self.resolve_scope(root)
        scope = [root, *descendants]

        if options.method is ExportMethod.GRAPHQL:
            raw_assets = await self._harvest_query(domain_parent_in(n.id for n in scope), options)
            domains = await self._group_bulk(raw_assets, options)
        else:
            domains = await self._assemble_rest(scope, options)

        target = ExportTarget(
            kind=NodeKind.COMMUNITY,
            name=root.name,
            id=root.id,
            description=root.description,
            exported_at=_timestamp(self.clock()),
            method=options.method.label,
            includes_subcommunities=len(descendants) > 0,
            subcommunities=tuple(n.ref() for n in descendants),
        )
        return self._finish(target, len(scope), domains)

    async def export_domain(
        self,
        domain: Node | str,
        options: ExportOptions | None = None,
    ) -> ExportDocument:
        """Export a single domain. No subtree expansion applies."""
        options = options or ExportOptions()
        node = await self._lookup(NodeKind.DOMAIN, domain)
        logger.info(f"Exporting domain: {node.name} (via {options.method.label})")

        community = None
        if node.parent is not None:
            community = Node(id=node.parent.id, name=node.parent.name or "", kind=NodeKind.COMMUNITY)

        groups: dict[str | None, DomainGroup] = {}
        seed = self._group_for(groups, node.id, node.name, community.name if community else None, options)
        seed.type_name = node.type_name
        seed.description = node.description

        if options.method is ExportMethod.GRAPHQL:
            raw_assets = await self._harvest_query(domain_id_eq(node.id), options)
            for raw in raw_assets:
                asset = await self._finish_asset(self.normalizer.normalize_asset(raw), options)
                seed.assets.append(asset)
        elif options.include_assets:
            seed.assets.extend(await self._rest_domain_assets(node, community, options))

        target = ExportTarget(
            kind=NodeKind.DOMAIN,
            name=node.name,
            id=node.id,
            description=node.description,
            exported_at=_timestamp(self.clock()),
            method=options.method.label,
            community=node.parent,
        )
        return self._finish(target, 1 if community else 0, list(groups.values()))

    async def export_many(
        self,
        communities: Iterable[Node | str],
        options: ExportOptions | None = None,
        writer: ExportWriter | None = None,
    ) -> list[ExportResult]:
        """
        Export several communities one after another.

        A failing target is recorded in its result and does not stop the
        remaining ones.
        """
        results: list[ExportResult] = []
        for community in communities:
            name = community.name if isinstance(community, Node) else community
            try:
                document = await self.export_community(community, options)
                path = writer.write(document) if writer is not None else None
                results.append(ExportResult(target=name, success=True, path=path, document=document))
            except Exception as e:
                logger.error(f"Export of {name} failed: {e}")
                results.append(ExportResult(target=name, success=False, error=str(e)))
        return results

    async def resolve_scope(self, community: Node) -> list[Node]:
        """All subcommunities below ``community``, depth-first."""
        registry = NodeRegistry(await self.client.all_nodes(NodeKind.COMMUNITY))
        descendants = registry.descendants_of(community.id)
        if descendants:
            logger.info(f"Found {len(descendants)} subcommunities of {community.name}")
            for sub in descendants:
                logger.debug(f"  - {sub.name}")
        else:
            logger.info(f"No subcommunities found for {community.name}")
        return descendants

    # -----------------------------------------------------------------------
    # Assembly
    # -----------------------------------------------------------------------

    async def _lookup(self, kind: NodeKind, target: Node | str) -> Node:
        if isinstance(target, Node):
            return target
        node = await self.client.find_node_by_name(kind, target)
        if node is None:
            raise NotFoundError(kind.value, target)
        logger.info(f"Found {kind.value}: {node.name} ({node.id})")
        return node

    async def _harvest_query(self, where: FilterExpression, options: ExportOptions) -> list[dict[str, Any]]:
        async def fetch_page(offset: int, limit: int) -> list[dict[str, Any]]:
            query = build_assets_query(
                limit=limit,
                offset=offset,
                where=where,
                include_attributes=options.include_attributes,
                include_relations=options.include_relations,
            )
            return await self.client.query_assets(query)

        raw_assets = await harvest_all(fetch_page, self.query_page_size, label="assets")
        logger.info(f"Total assets fetched: {len(raw_assets)}")
        return raw_assets

    async def _group_bulk(self, raw_assets: list[dict[str, Any]], options: ExportOptions) -> list[DomainGroup]:
        groups: dict[str | None, DomainGroup] = {}
        for raw in raw_assets:
            asset = await self._finish_asset(self.normalizer.normalize_asset(raw), options)
            domain = asset.domain
            group = self._group_for(
                groups,
                domain.id if domain else None,
                domain.name if domain else None,
                asset.community.name if asset.community else None,
                options,
            )
            if group.type_name is None and domain is not None:
                group.type_name = domain.type_name
            group.assets.append(asset)
        return list(groups.values())

    async def _assemble_rest(self, scope: list[Node], options: ExportOptions) -> list[DomainGroup]:
        groups: dict[str | None, DomainGroup] = {}
        for community in scope:
            domains = await self.client.all_nodes(NodeKind.DOMAIN, {"communityId": community.id})
            logger.info(f"Found {len(domains)} domains in {community.name}")

            for domain in domains:
                logger.debug(f"Processing domain: {domain.name}")
                group = self._group_for(groups, domain.id, domain.name, community.name, options)
                if group.type_name is None:
                    group.type_name = domain.type_name
                if group.description is None:
                    group.description = domain.description
                if options.include_assets:
                    group.assets.extend(await self._rest_domain_assets(domain, community, options))
        return list(groups.values())

    async def _rest_domain_assets(
        self,
        domain: Node,
        community: Node | None,
        options: ExportOptions,
    ) -> list[Asset]:
        raw_assets = await self.client.all_assets({"domainId": domain.id})
        logger.info(f"Found {len(raw_assets)} assets in {domain.name}")

        assets: list[Asset] = []
        for count, raw in enumerate(raw_assets, start=1):
            attributes = await self.client.get_attributes(raw["id"]) if options.include_attributes else []
            relations = await self.client.get_relations(raw["id"]) if options.include_relations else []
            asset = self.normalizer.normalize_rest_asset(
                raw,
                attributes=attributes,
                relations=relations,
                domain=domain,
                community=community,
            )
            assets.append(await self._finish_asset(asset, options))
            if count % 10 == 0:
                logger.debug(f"Processed {count}/{len(raw_assets)} assets...")
        return assets

    async def _finish_asset(self, asset: Asset, options: ExportOptions) -> Asset:
        if not options.include_responsibilities:
            return asset
        raw = await self.client.get_authorizations(asset.id, options.include_inherited)
        authorizations = await self.enricher.enrich(asset.id, raw, options.include_inherited)
        return replace(asset, authorizations=authorizations)

    def _group_for(
        self,
        groups: dict[str | None, DomainGroup],
        domain_id: str | None,
        domain_name: str | None,
        community_name: str | None,
        options: ExportOptions,
    ) -> DomainGroup:
        key = domain_name if options.group_domains_by is GroupingKey.NAME else domain_id
        group = groups.get(key)
        if group is None:
            group = DomainGroup(id=domain_id, name=domain_name, community_name=community_name)
            groups[key] = group
        return group

    def _finish(self, target: ExportTarget, total_communities: int, domains: list[DomainGroup]) -> ExportDocument:
        statistics = Statistics.compute(total_communities, domains)
        logger.info(
            "Export of %s complete: %d communities, %d domains, %d assets "
            "(%d with attributes, %d with relations)",
            target.name,
            statistics.total_communities,
            statistics.total_domains,
            statistics.total_assets,
            statistics.assets_with_attributes,
            statistics.assets_with_relations,
        )
        return ExportDocument(target=target, domains=domains, statistics=statistics)
