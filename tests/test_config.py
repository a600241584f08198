"""Tests for configuration loading."""

from __future__ import annotations

import json

import pytest

from releasegate.config import (
    DictConfigSource,
    EnvConfigSource,
    FileConfigSource,
    Settings,
    load_policy,
    load_settings,
    merge_sources,
)
from releasegate.errors import ConfigSourceError, ConfigValidationError


# =============================================================================
# File Sources
# =============================================================================


class TestFileConfigSource:
    """Tests for FileConfigSource."""

    def test_yaml(self, tmp_path):
        path = tmp_path / "releasegate.yaml"
        path.write_text(
            "versioning: pep440\n"
            "allowedVersions: '<3.0'\n"
            "ignoreDeprecated: true\n"
            "logging:\n"
            "  level: debug\n"
        )

        data = FileConfigSource(path).load()

        assert data["versioning"] == "pep440"
        assert data["allowedVersions"] == "<3.0"
        assert data["ignoreDeprecated"] is True
        assert data["logging"] == {"level": "debug"}

    def test_json(self, tmp_path):
        path = tmp_path / "releasegate.json"
        path.write_text(json.dumps({"followTag": "next"}))

        assert FileConfigSource(path).load() == {"followTag": "next"}

    def test_toml(self, tmp_path):
        path = tmp_path / "releasegate.toml"
        path.write_text('versioning = "poetry"\nrespectLatest = false\n')

        assert FileConfigSource(path).load() == {
            "versioning": "poetry",
            "respectLatest": False,
        }

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")

        assert FileConfigSource(path).load() == {}

    def test_missing_optional_file(self, tmp_path):
        assert FileConfigSource(tmp_path / "missing.yaml").load() == {}

    def test_missing_required_file(self, tmp_path):
        with pytest.raises(ConfigSourceError, match="not found"):
            FileConfigSource(tmp_path / "missing.yaml", required=True).load()

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(ConfigSourceError, match="Failed to load"):
            FileConfigSource(path).load()

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigSourceError, match="must be a mapping"):
            FileConfigSource(path).load()

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[section]\n")

        with pytest.raises(ConfigSourceError, match="Unsupported"):
            FileConfigSource(path).load()


# =============================================================================
# Environment Source
# =============================================================================


class TestEnvConfigSource:
    """Tests for EnvConfigSource."""

    def test_known_variables(self):
        source = EnvConfigSource(
            environ={
                "RELEASEGATE_VERSIONING": "semver",
                "RELEASEGATE_ALLOWED_VERSIONS": "<2.0.0",
                "RELEASEGATE_IGNORE_UNSTABLE": "false",
                "RELEASEGATE_RESPECT_LATEST": "Yes",
                "RELEASEGATE_LOG_LEVEL": "debug",
                "RELEASEGATE_LOG_FORMAT": "json",
            }
        )

        assert source.load() == {
            "versioning": "semver",
            "allowedVersions": "<2.0.0",
            "ignoreUnstable": False,
            "respectLatest": True,
            "logging": {"level": "debug", "format": "json"},
        }

    def test_unrelated_variables_ignored(self):
        source = EnvConfigSource(
            environ={"PATH": "/usr/bin", "RELEASEGATE_UNKNOWN": "x"}
        )

        assert source.load() == {}

    def test_custom_prefix(self):
        source = EnvConfigSource(prefix="RG", environ={"RG_FOLLOW_TAG": "beta"})

        assert source.load() == {"followTag": "beta"}

    def test_invalid_boolean(self):
        source = EnvConfigSource(environ={"RELEASEGATE_IGNORE_DEPRECATED": "maybe"})

        with pytest.raises(ConfigValidationError) as exc_info:
            source.load()

        assert exc_info.value.field == "ignoreDeprecated"


# =============================================================================
# Merging
# =============================================================================


class TestMerging:
    """Tests for merge_sources, load_policy and load_settings."""

    def test_priority_order(self):
        low = DictConfigSource({"allowedVersions": "<2", "versioning": "pep440"}, priority=0)
        high = DictConfigSource({"allowedVersions": "<3"}, priority=10)

        merged = merge_sources(high, low)

        assert merged == {"allowedVersions": "<3", "versioning": "pep440"}

    def test_snake_case_overrides_camel_case(self):
        low = DictConfigSource({"allowedVersions": "<2"}, priority=0)
        high = DictConfigSource({"allowed_versions": "<3"}, priority=10)

        assert merge_sources(low, high) == {"allowedVersions": "<3"}

    def test_logging_sections_merge_per_key(self):
        low = DictConfigSource({"logging": {"level": "debug", "format": "json"}})
        high = DictConfigSource({"logging": {"level": "error"}}, priority=10)

        assert merge_sources(low, high)["logging"] == {"level": "error", "format": "json"}

    def test_env_overrides_file(self, tmp_path):
        path = tmp_path / "releasegate.yaml"
        path.write_text("allowedVersions: '<2'\nversioning: pep440\n")
        env = EnvConfigSource(environ={"RELEASEGATE_ALLOWED_VERSIONS": "<5"})

        policy = load_policy(FileConfigSource(path), env)

        assert policy.allowed_versions == "<5"
        assert policy.versioning == "pep440"

    def test_overrides_win(self):
        env = EnvConfigSource(environ={"RELEASEGATE_FOLLOW_TAG": "next"})

        policy = load_policy(env, overrides={"followTag": "beta", "dep_name": "x"})

        assert policy.follow_tag == "beta"
        assert policy.dep_name == "x"

    def test_load_policy_ignores_logging(self):
        policy = load_policy(DictConfigSource({"logging": {"level": "debug"}}))

        assert policy.to_dict() == {"versioning": "npm"}

    def test_load_policy_rejects_unknown_keys(self):
        with pytest.raises(ConfigValidationError, match="Unknown filter option"):
            load_policy(DictConfigSource({"allowedVersion": "<2"}))

    def test_load_settings(self):
        settings = load_settings(
            DictConfigSource({"logging": {"level": "debug", "format": "logfmt"}})
        )

        assert settings == Settings(log_level="debug", log_format="logfmt")

    def test_load_settings_defaults(self):
        assert load_settings() == Settings()

    def test_load_settings_rejects_non_mapping(self):
        with pytest.raises(ConfigValidationError):
            load_settings(DictConfigSource({"logging": "debug"}))
