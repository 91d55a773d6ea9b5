"""Command line entry point.

Usage:
    catalog-export check
    catalog-export communities --tree
    catalog-export export-community "Finance" --responsibilities
    catalog-export export-community "Finance" "Marketing" --method rest
    catalog-export export-domain "Business Glossary"
    catalog-export view exports/Finance_GraphQL_2024-01-15T10-20-30-123Z.json
    catalog-export serve --port 8053
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from . import _bootstrap as bs
from .catalog.loader import load_export
from .catalog.types import NodeKind
from .errors import CatalogError, NotFoundError
from .exporter import ExportMethod, ExportOptions
from .report import render_hierarchy, summarize

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="catalog-export",
        description="Export communities and domains from a metadata catalog to JSON",
    )
    parser.add_argument(
        "-c", "--config",
        help="Config file (default: $CATALOG_EXPORT_CONFIG or config.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("check", help="Verify connectivity and credentials")

    communities = sub.add_parser("communities", help="List communities")
    communities.add_argument("--tree", action="store_true", help="Show the community hierarchy")
    communities.add_argument("--roots-only", action="store_true", help="Only list root communities")

    export_community = sub.add_parser("export-community", help="Export one or more communities")
    export_community.add_argument("names", nargs="+", help="Community name(s), matched exactly")
    export_community.add_argument(
        "--no-subcommunities",
        action="store_true",
        help="Do not include subcommunities",
    )
    _add_export_flags(export_community)

    export_domain = sub.add_parser("export-domain", help="Export a single domain")
    export_domain.add_argument("name", help="Domain name, matched exactly")
    _add_export_flags(export_domain)

    view = sub.add_parser("view", help="Summarize an export file")
    view.add_argument("file", nargs="?", help="Export file (lists available exports if omitted)")
    view.add_argument("--output-dir", help="Directory to list exports from")

    serve = sub.add_parser("serve", help="Run the export HTTP service")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8053)

    return parser


def _add_export_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--method",
        choices=[m.value for m in ExportMethod],
        help="graphql: one bulk query (default); rest: per-domain listing",
    )
    parser.add_argument("--no-assets", action="store_true", help="List domains only (rest method)")
    parser.add_argument("--no-attributes", action="store_true", help="Skip asset attributes")
    parser.add_argument("--no-relations", action="store_true", help="Skip asset relations")
    parser.add_argument(
        "--responsibilities",
        action="store_true",
        help="Include responsibilities with resolved owners",
    )
    parser.add_argument(
        "--direct-only",
        action="store_true",
        help="Only keep responsibilities granted on the asset itself",
    )
    parser.add_argument("--group-by", choices=["name", "id"], help="Domain grouping key")
    parser.add_argument("--output-dir", help="Where to write export files")


def options_from_args(args: argparse.Namespace, defaults: ExportOptions) -> ExportOptions:
    """Apply command line flags on top of the configured defaults."""
    overrides: dict = {}
    if args.method:
        overrides["method"] = args.method
    if getattr(args, "no_subcommunities", False):
        overrides["include_subcommunities"] = False
    if args.no_assets:
        overrides["include_assets"] = False
    if args.no_attributes:
        overrides["include_attributes"] = False
    if args.no_relations:
        overrides["include_relations"] = False
    if args.responsibilities:
        overrides["include_responsibilities"] = True
    if args.direct_only:
        overrides["include_inherited"] = False
    if args.group_by:
        overrides["group_domains_by"] = args.group_by
    return defaults.updated(overrides)


async def _check(config) -> int:
    async with bs.build_client(config) as client:
        await client.verify()
    print("Connection OK")
    return 0


async def _communities(args, config) -> int:
    async with bs.build_client(config) as client:
        communities = await client.all_nodes(NodeKind.COMMUNITY)

    if not communities:
        print("No communities found.")
        return 0

    if args.tree:
        for line in render_hierarchy(communities):
            print(line)
    else:
        shown = [c for c in communities if c.is_root] if args.roots_only else communities
        for community in shown:
            parent = f" (child of: {community.parent.name})" if community.parent else ""
            description = f" - {community.description[:60]}" if community.description else ""
            print(f"{community.name}{parent}{description}")
    print(f"\nTotal communities: {len(communities)}")
    return 0


async def _export_community(args, config) -> int:
    options = options_from_args(args, bs.build_options(config))
    writer = bs.build_writer(config, args.output_dir)

    async with bs.build_client(config) as client:
        assembler = bs.build_assembler(config, client)
        if len(args.names) == 1:
            document = await assembler.export_community(args.names[0], options)
            path = writer.write(document)
            _print_statistics(document)
            print(f"Output file: {path}")
            return 0

        results = await assembler.export_many(args.names, options, writer=writer)

    print("Export summary:")
    for result in results:
        if result.success:
            print(f"  ✓ {result.target} -> {result.path}")
        else:
            print(f"  ✗ {result.target}")
            print(f"    Error: {result.error}")
    return 0 if all(r.success for r in results) else 1


async def _export_domain(args, config) -> int:
    options = options_from_args(args, bs.build_options(config))
    writer = bs.build_writer(config, args.output_dir)

    async with bs.build_client(config) as client:
        assembler = bs.build_assembler(config, client)
        document = await assembler.export_domain(args.name, options)

    path = writer.write(document)
    _print_statistics(document)
    print(f"Output file: {path}")
    return 0


def _print_statistics(document) -> None:
    stats = document.statistics
    print("Export completed successfully!")
    print(f"  Communities: {stats.total_communities}")
    print(f"  Domains: {stats.total_domains}")
    print(f"  Assets: {stats.total_assets}")
    print(f"  With attributes: {stats.assets_with_attributes}")
    print(f"  With relations: {stats.assets_with_relations}")


def _view(args, config) -> int:
    if not args.file:
        writer = bs.build_writer(config, args.output_dir)
        files = writer.list_exports()
        if not files:
            print(f"No exports found in {writer.output_dir}")
        else:
            print("Available exports:")
            for path in files:
                print(f"  - {path.name}")
        return 0

    try:
        document = load_export(args.file)
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        return 1

    for line in summarize(document):
        print(line)
    return 0


def _serve(args) -> int:
    import uvicorn

    uvicorn.run("catalog_export.service_app:app", host=args.host, port=args.port)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        return _serve(args)

    try:
        config, _config_path = bs.load_config(args.config)
        if args.command == "view":
            return _view(args, config)
        if args.command == "check":
            return asyncio.run(_check(config))
        if args.command == "communities":
            return asyncio.run(_communities(args, config))
        if args.command == "export-community":
            return asyncio.run(_export_community(args, config))
        if args.command == "export-domain":
            return asyncio.run(_export_domain(args, config))
    except NotFoundError as e:
        print(f"Error: {e} - the {e.kind} does not exist in the catalog", file=sys.stderr)
        return 2
    except CatalogError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
