"""Shared initialisation helpers.

Each function constructs exactly one component of the export stack.
Both cli.py and service_app.py call these so the two entry points stay
in sync.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

def load_config(config_path: str | None = None):
    """Load config from file or fall back to defaults.

    Returns ``(config, resolved_config_path)`` where *resolved_config_path*
    is the string that was actually used. Credentials from the environment
    override the file.
    """
    from .config import Config

    config_path = config_path or os.environ.get("CATALOG_EXPORT_CONFIG", "config.yaml")
    if Path(config_path).exists():
        config = Config.from_yaml(config_path)
        logger.info("Loaded config from %s", config_path)
    else:
        config = Config()
        logger.info("Using default config (no file at %s)", config_path)
    config.apply_env()
    return config, config_path


# ---------------------------------------------------------------------------
# Catalog client
# ---------------------------------------------------------------------------

def build_credentials(config):
    """Build credentials from the auth section."""
    from .auth import create_credentials

    credentials = create_credentials(config.auth)
    logger.info("Authenticating with %s", credentials.describe())
    return credentials


def build_client(config, transport=None):
    """Construct the HTTP catalog client.

    *transport* lets callers substitute an ``httpx`` transport (tests use
    ``httpx.MockTransport``).
    """
    from .client.http import HttpCatalogClient

    catalog = config.catalog
    client = HttpCatalogClient(
        api_url=catalog.resolved_api_url(),
        graph_url=catalog.resolved_graph_url(),
        credentials=build_credentials(config),
        timeout=catalog.timeout_seconds,
        verify=catalog.verify_tls,
        page_size=catalog.page_size,
        transport=transport,
    )
    logger.info("Catalog API: %s", client.api_url)
    return client


# ---------------------------------------------------------------------------
# Export pipeline
# ---------------------------------------------------------------------------

def build_assembler(config, client):
    """Construct the ExportAssembler around *client*."""
    from .exporter import ExportAssembler

    return ExportAssembler(client, query_page_size=config.catalog.query_page_size)


def build_options(config):
    """Default export options from the export section."""
    from .exporter import ExportOptions

    return ExportOptions.from_config(config.export)


def build_writer(config, output_dir: str | None = None):
    """Construct the export writer for the configured (or given) directory."""
    from .writer import ExportWriter

    writer = ExportWriter(output_dir or config.export.output_dir)
    logger.debug("Exports will be written to %s", writer.output_dir)
    return writer
