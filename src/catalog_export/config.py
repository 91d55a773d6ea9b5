"""Configuration for the catalog export tool."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .auth.config import AuthConfig, BasicAuthConfig, BearerTokenConfig
from .errors import ConfigError


@dataclass
class CatalogConfig:
    """Where the catalog service lives and how to page through it."""
    domain: str | None = None          # e.g. "acme.collibra.com"
    api_url: str | None = None         # defaults to https://{domain}/rest/2.0
    graph_url: str | None = None       # defaults to https://{domain}/graphql/knowledgeGraph/v1
    timeout_seconds: float = 30.0
    verify_tls: bool = True
    page_size: int = 1000              # REST listings
    query_page_size: int = 100         # structured asset queries

    def resolved_api_url(self) -> str:
        if self.api_url:
            return self.api_url.rstrip("/")
        if not self.domain:
            raise ConfigError("Catalog domain or api_url must be configured")
        return f"https://{self.domain}/rest/2.0"

    def resolved_graph_url(self) -> str:
        if self.graph_url:
            return self.graph_url
        if not self.domain:
            raise ConfigError("Catalog domain or graph_url must be configured")
        return f"https://{self.domain}/graphql/knowledgeGraph/v1"


@dataclass
class ExportConfig:
    """Default export options."""
    output_dir: str = "./exports"
    method: str = "graphql"  # "graphql" (bulk query) or "rest" (per domain)
    include_subcommunities: bool = True
    include_assets: bool = True
    include_attributes: bool = True
    include_relations: bool = True
    include_responsibilities: bool = False
    include_inherited: bool = True
    group_domains_by: str = "name"  # "name" or "id"


@dataclass
class Config:
    """Top-level configuration."""
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """
        Create config from dictionary.

        Flat ``config.json`` files (``domain``, ``username``, ``password``,
        ``apiURL``, ``graphURL``) are accepted as well as the nested form.
        """
        catalog_data = dict(data.get("catalog", {}))
        auth_data = data.get("auth", {})
        export_data = data.get("export", {})

        for legacy_key, key in (("domain", "domain"), ("apiURL", "api_url"), ("graphURL", "graph_url")):
            if legacy_key in data and key not in catalog_data:
                catalog_data[key] = data[legacy_key]

        try:
            auth = AuthConfig.from_dict(auth_data)
            if "username" in data and not auth.basic.username:
                auth.basic = BasicAuthConfig(username=data["username"], password=data.get("password"))

            return cls(
                catalog=CatalogConfig(**catalog_data),
                auth=auth,
                export=ExportConfig(**export_data),
            )
        except TypeError as e:
            # Unknown keys in a section
            raise ConfigError(f"Invalid configuration: {e}") from e

    @classmethod
    def from_yaml(cls, path: str | Path) -> Config:
        """Load config from a YAML (or JSON) file."""
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    def apply_env(self, environ: dict[str, str] | None = None) -> Config:
        """Override credentials from ``CATALOG_EXPORT_*`` environment variables."""
        environ = os.environ if environ is None else environ

        username = environ.get("CATALOG_EXPORT_USERNAME")
        password = environ.get("CATALOG_EXPORT_PASSWORD")
        token = environ.get("CATALOG_EXPORT_TOKEN")

        if username:
            self.auth.basic.username = username
        if password:
            self.auth.basic.password = password
        if token:
            self.auth.bearer = BearerTokenConfig(token=token)
            if not username:
                self.auth.method = "bearer"
        return self
