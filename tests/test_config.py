"""Tests for configuration loading."""

import json

import pytest

from catalog_export import _bootstrap as bs
from catalog_export.config import CatalogConfig, Config
from catalog_export.errors import ConfigError
from catalog_export.exporter import ExportMethod


class TestConfig:
    def test_nested_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "catalog:\n"
            "  domain: acme.example.com\n"
            "  page_size: 500\n"
            "auth:\n"
            "  method: basic\n"
            "  basic:\n"
            "    username: jdoe\n"
            "    password: secret\n"
            "export:\n"
            "  method: rest\n"
            "  include_responsibilities: true\n",
            encoding="utf-8",
        )

        config = Config.from_yaml(path)

        assert config.catalog.resolved_api_url() == "https://acme.example.com/rest/2.0"
        assert config.catalog.resolved_graph_url() == "https://acme.example.com/graphql/knowledgeGraph/v1"
        assert config.catalog.page_size == 500
        assert config.auth.basic.username == "jdoe"
        assert config.export.method == "rest"
        assert config.export.include_responsibilities is True

    def test_flat_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "domain": "acme.example.com",
            "username": "jdoe",
            "password": "secret",
            "apiURL": "https://acme.example.com/rest/2.0/",
        }), encoding="utf-8")

        config = Config.from_yaml(path)

        assert config.catalog.domain == "acme.example.com"
        assert config.catalog.resolved_api_url() == "https://acme.example.com/rest/2.0"
        assert config.auth.basic.password == "secret"

    def test_missing_domain(self):
        with pytest.raises(ConfigError):
            CatalogConfig().resolved_api_url()

    @pytest.mark.parametrize("data", [
        {"catalog": {"page_sise": 10}},
        {"export": {"methd": "rest"}},
        {"auth": {"basic": {"user": "jdoe"}}},
    ])
    def test_unknown_keys(self, data):
        with pytest.raises(ConfigError) as excinfo:
            Config.from_dict(data)

        assert "Invalid configuration" in str(excinfo.value)

    def test_env_overrides(self):
        config = Config.from_dict({"auth": {"basic": {"username": "file-user", "password": "file-pass"}}})

        config.apply_env({"CATALOG_EXPORT_PASSWORD": "env-pass"})

        assert config.auth.basic.username == "file-user"
        assert config.auth.basic.password == "env-pass"
        assert config.auth.method == "basic"

    def test_env_token_switches_to_bearer(self):
        config = Config().apply_env({"CATALOG_EXPORT_TOKEN": "opaque-token"})

        assert config.auth.method == "bearer"
        assert config.auth.bearer.token == "opaque-token"


class TestBootstrap:
    def test_load_config_without_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("CATALOG_EXPORT_USERNAME", raising=False)
        monkeypatch.delenv("CATALOG_EXPORT_PASSWORD", raising=False)
        monkeypatch.delenv("CATALOG_EXPORT_TOKEN", raising=False)

        config, path = bs.load_config(str(tmp_path / "missing.yaml"))

        assert path.endswith("missing.yaml")
        assert config.export.output_dir == "./exports"

    def test_options_follow_export_section(self):
        config = Config.from_dict({"export": {"method": "REST", "group_domains_by": "id"}})

        options = bs.build_options(config)

        assert options.method is ExportMethod.REST
        assert options.group_domains_by.value == "id"

    @pytest.mark.parametrize("export", [{"method": "soap"}, {"group_domains_by": "colour"}])
    def test_unusable_export_section(self, export):
        config = Config.from_dict({"export": export})

        with pytest.raises(ConfigError):
            bs.build_options(config)

    def test_build_client_requires_credentials(self):
        config = Config.from_dict({"catalog": {"domain": "acme.example.com"}})

        with pytest.raises(ConfigError):
            bs.build_client(config)
