"""
Unit tests for configuration source resolution.
"""

import pytest

from hotconf.config.environments import (
    normalize_name,
    resolve_sources,
    selected_environments,
)
from hotconf.config.settings import LoaderSettings
from hotconf.utils.exceptions import ConfigurationError


@pytest.mark.unit
class TestNormalizeName:
    """Test configuration name handling."""

    def test_name_is_lowercased(self):
        """Test name is lowercased."""
        assert normalize_name("Billing") == "billing"

    @pytest.mark.parametrize("bad", ["", "   ", "../etc", "a/b", "a\\b", ".."])
    def test_rejects_unusable_names(self, bad):
        """Test rejects unusable names."""
        with pytest.raises(ConfigurationError) as exc_info:
            normalize_name(bad)
        assert exc_info.value.error_code == "invalid_name"


@pytest.mark.unit
class TestSelectedEnvironments:
    """Test environment selector ordering."""

    def test_fixed_order_regardless_of_mapping_order(self, settings):
        """Test fixed order regardless of mapping order."""
        environ = {
            "HOTCONF_LOCAL_CONFIG": "local",
            "HOTCONF_PROD_CONFIG": "prod",
            "HOTCONF_STAGE_CONFIG": "stage",
        }
        assert selected_environments(settings, environ) == ["prod", "stage", "local"]

    def test_empty_values_are_skipped(self, settings):
        """Test empty values are skipped."""
        environ = {"HOTCONF_PROD_CONFIG": "", "HOTCONF_STAGE_CONFIG": "  ", "HOTCONF_LOCAL_CONFIG": "dev"}
        assert selected_environments(settings, environ) == ["dev"]

    def test_path_like_value_is_ignored(self, settings, recording_logger):
        """Test path like value is ignored."""
        environ = {"HOTCONF_PROD_CONFIG": "../secrets"}
        assert selected_environments(settings, environ, recording_logger) == []
        assert recording_logger.events("warning") == ["config_selector_ignored"]

    def test_reads_process_environment_by_default(self, settings, monkeypatch):
        """Test reads process environment by default."""
        monkeypatch.setenv("HOTCONF_STAGE_CONFIG", "staging")
        assert selected_environments(settings) == ["staging"]


@pytest.mark.unit
class TestResolveSources:
    """Test base file lookup and layer ordering."""

    def test_base_in_root_wins_over_config_dir(self, settings, config_root, write_yaml):
        """Test base in root wins over config dir."""
        root_file = write_yaml(config_root / "svc.yaml", {"a": 1})
        write_yaml(config_root / "config" / "svc.yaml", {"a": 2})
        sources = resolve_sources("SVC", settings, {})
        assert sources.base == root_file

    def test_base_found_in_config_dir(self, settings, config_root, write_yaml):
        """Test base found in config dir."""
        base = write_yaml(config_root / "config" / "svc.yaml", {"a": 1})
        assert resolve_sources("svc", settings, {}).base == base

    def test_yml_extension_is_accepted(self, settings, config_root, write_yaml):
        """Test yml extension is accepted."""
        base = write_yaml(config_root / "svc.yml", {"a": 1})
        assert resolve_sources("svc", settings, {}).base == base

    def test_missing_base_is_none(self, settings):
        """Test missing base is none."""
        sources = resolve_sources("svc", settings, {})
        assert sources.base is None
        assert sources.files == ()

    def test_full_precedence_order(self, settings, config_root, write_yaml):
        """Test full precedence order."""
        config_dir = config_root / "config"
        base = write_yaml(config_root / "svc.yaml", {})
        prod = write_yaml(config_dir / "prod.yaml", {})
        local = write_yaml(config_dir / "dev.yaml", {})
        override = write_yaml(config_dir / "override.yaml", {})
        tests = write_yaml(config_dir / "tests.yaml", {})

        environ = {"HOTCONF_LOCAL_CONFIG": "dev", "HOTCONF_PROD_CONFIG": "prod"}
        sources = resolve_sources("svc", settings, environ)

        assert sources.name == "svc"
        assert sources.files == (base, prod, local, override, tests)

    def test_selector_without_file_is_skipped(self, settings, config_root, write_yaml):
        """Test selector without file is skipped."""
        write_yaml(config_root / "svc.yaml", {})
        override = write_yaml(config_root / "config" / "override.yaml", {})
        sources = resolve_sources("svc", settings, {"HOTCONF_PROD_CONFIG": "nowhere"})
        assert sources.layers == (override,)

    def test_duplicate_layer_keeps_highest_position(self, settings, config_root, write_yaml):
        """Test duplicate layer keeps highest position."""
        config_dir = config_root / "config"
        write_yaml(config_root / "svc.yaml", {})
        override = write_yaml(config_dir / "override.yaml", {})
        tests = write_yaml(config_dir / "tests.yaml", {})
        sources = resolve_sources("svc", settings, {"HOTCONF_PROD_CONFIG": "tests"})
        assert sources.layers == (override, tests)

    def test_custom_selector_names(self, config_root, write_yaml):
        """Test custom selector names."""
        settings = LoaderSettings(base_dir=config_root, env_selectors=["APP_ENV"])
        write_yaml(config_root / "svc.yaml", {})
        qa = write_yaml(config_root / "config" / "qa.yaml", {})
        sources = resolve_sources("svc", settings, {"APP_ENV": "qa", "HOTCONF_PROD_CONFIG": "x"})
        assert sources.layers == (qa,)
