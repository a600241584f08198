"""Tests for the command-line interface."""

from __future__ import annotations

import json
import os

import pytest
from typer.testing import CliRunner

from releasegate.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep RELEASEGATE_* variables from the host out of the tests."""
    for name in list(os.environ):
        if name.startswith("RELEASEGATE_"):
            monkeypatch.delenv(name)


@pytest.fixture
def releases_file(tmp_path):
    path = tmp_path / "releases.json"
    path.write_text(
        json.dumps(
            {
                "releases": [
                    "1.0.0",
                    "1.1.0",
                    {"version": "1.1.5", "isDeprecated": True},
                    "1.2.0-beta.1",
                    "2.0.0",
                ],
                "latestVersion": "2.0.0",
            }
        )
    )
    return path


def invoke(*args: str):
    return runner.invoke(app, ["filter", *args])


# =============================================================================
# filter
# =============================================================================


class TestFilterCommand:
    """Tests for the filter command."""

    def test_text_output(self, releases_file):
        result = invoke(str(releases_file), "--current", "1.0.0")

        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["1.1.0", "1.1.5", "2.0.0"]

    def test_latest_option_overrides_file(self, releases_file):
        result = invoke(str(releases_file), "-c", "1.0.0", "--latest", "1.1.0")

        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["1.1.0"]

    def test_json_output(self, releases_file):
        result = invoke(
            str(releases_file), "-c", "1.0.0", "-a", "<2.0.0", "--format", "json"
        )

        assert result.exit_code == 0
        document = json.loads(result.stdout)
        assert document["currentVersion"] == "1.0.0"
        assert document["latestVersion"] == "2.0.0"
        assert document["exit"] == "capped-at-latest"
        assert document["allowedVersionsStrategy"] == "scheme-range"
        assert document["releases"] == [
            {"version": "1.1.0"},
            {"version": "1.1.5", "isDeprecated": True},
        ]

    def test_ignore_deprecated(self, releases_file):
        result = invoke(str(releases_file), "-c", "1.0.0", "--ignore-deprecated")

        assert result.stdout.splitlines() == ["1.1.0", "2.0.0"]

    def test_include_unstable(self, releases_file):
        result = invoke(
            str(releases_file), "-c", "1.0.0", "--include-unstable", "-f", "json"
        )

        document = json.loads(result.stdout)
        assert document["exit"] == "unstable-allowed"
        assert "1.2.0-beta.1" in [r["version"] for r in document["releases"]]

    def test_ignore_latest(self, releases_file):
        result = invoke(str(releases_file), "-c", "1.0.0", "--latest", "1.1.0", "--ignore-latest")

        assert result.stdout.splitlines() == ["1.1.0", "1.1.5", "2.0.0"]

    def test_config_file(self, releases_file, tmp_path):
        config = tmp_path / "releasegate.yaml"
        config.write_text("allowedVersions: '/^1\\./'\nignoreDeprecated: true\n")

        result = invoke(str(releases_file), "-c", "1.0.0", "--config", str(config))

        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["1.1.0"]

    def test_environment(self, releases_file, monkeypatch):
        monkeypatch.setenv("RELEASEGATE_ALLOWED_VERSIONS", "!/^1\\./")

        result = invoke(str(releases_file), "-c", "1.0.0")

        assert result.stdout.splitlines() == ["2.0.0"]

    def test_option_overrides_environment(self, releases_file, monkeypatch):
        monkeypatch.setenv("RELEASEGATE_ALLOWED_VERSIONS", "!/^1\\./")

        result = invoke(str(releases_file), "-c", "1.0.0", "-a", "~1.1.0")

        assert result.stdout.splitlines() == ["1.1.0", "1.1.5"]

    def test_invalid_allowed_versions(self, releases_file):
        result = invoke(str(releases_file), "-c", "1.0.0", "-a", "not-a-range!!")

        assert result.exit_code == 2
        assert "Invalid `allowedVersions`" in result.output
        assert '"not-a-range!!"' in result.output

    def test_unknown_scheme(self, releases_file):
        result = invoke(str(releases_file), "-c", "1.0.0", "--versioning", "maven")

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_unknown_format(self, releases_file):
        result = invoke(str(releases_file), "-c", "1.0.0", "--format", "xml")

        assert result.exit_code == 1
        assert "Unknown format" in result.output

    def test_missing_config_file(self, releases_file, tmp_path):
        result = invoke(
            str(releases_file), "-c", "1.0.0", "--config", str(tmp_path / "nope.yaml")
        )

        assert result.exit_code == 1
        assert "Configuration file not found" in result.output

    def test_missing_releases_file(self, tmp_path):
        result = invoke(str(tmp_path / "nope.json"), "-c", "1.0.0")

        assert result.exit_code == 1
        assert "Failed to read releases" in result.output

    def test_malformed_tags(self, tmp_path):
        path = tmp_path / "releases.json"
        path.write_text(json.dumps({"releases": ["1.0.0", "1.1.0"], "tags": ["latest"]}))

        result = invoke(str(path), "-c", "1.0.0")

        assert result.exit_code == 1
        assert "tags must be a mapping" in result.output

    def test_pep440_scheme(self, tmp_path):
        path = tmp_path / "releases.yaml"
        path.write_text("- '1.0'\n- '1.1rc1'\n- '1.1'\n- '2.0'\n")

        result = invoke(str(path), "-c", "1.0", "--versioning", "pep440", "-a", "<2")

        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["1.1"]


# =============================================================================
# schemes
# =============================================================================


class TestSchemesCommand:
    """Tests for the schemes command."""

    def test_lists_builtin_schemes(self):
        result = runner.invoke(app, ["schemes"])

        assert result.exit_code == 0
        ids = [line.split()[0] for line in result.stdout.splitlines()]
        assert ids == ["npm", "pep440", "poetry", "semver"]
