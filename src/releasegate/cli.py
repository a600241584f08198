"""Command-line interface for releasegate."""

import json
from pathlib import Path
from typing import Annotated, Any, Optional

import typer

from releasegate.config import (
    ConfigSource,
    EnvConfigSource,
    FileConfigSource,
    load_policy,
    load_settings,
)
from releasegate.errors import (
    ConfigSourceError,
    ConfigValidationError,
    ReleaseDataError,
    SchemeNotFoundError,
)
from releasegate.filter import VersionFilter
from releasegate.logging import configure_logging
from releasegate.release_file import load_release_file
from releasegate.versioning import get_registry

app = typer.Typer(
    name="releasegate",
    help="Filter published releases down to valid upgrade targets",
    add_completion=False,
)

OUTPUT_FORMATS = ("text", "json")


@app.command(name="filter")
def filter_cmd(
    releases_file: Annotated[
        Path,
        typer.Argument(help="JSON or YAML file listing the published releases"),
    ],
    current: Annotated[
        str,
        typer.Option("--current", "-c", help="Version currently in use"),
    ],
    latest: Annotated[
        Optional[str],
        typer.Option("--latest", "-l", help="Registry 'latest' tag (overrides the file)"),
    ] = None,
    versioning: Annotated[
        Optional[str],
        typer.Option("--versioning", help="Versioning scheme id (npm, semver, pep440, poetry)"),
    ] = None,
    allowed_versions: Annotated[
        Optional[str],
        typer.Option("--allowed-versions", "-a", help="Range, /regex/ or !/regex/"),
    ] = None,
    follow_tag: Annotated[
        Optional[str],
        typer.Option("--follow-tag", help="Follow a registry tag instead of latest"),
    ] = None,
    ignore_deprecated: Annotated[
        bool,
        typer.Option("--ignore-deprecated", help="Skip deprecated releases"),
    ] = False,
    include_unstable: Annotated[
        bool,
        typer.Option("--include-unstable", help="Keep pre-releases and ignore the latest tag"),
    ] = False,
    ignore_latest: Annotated[
        bool,
        typer.Option("--ignore-latest", help="Allow versions above the latest tag"),
    ] = False,
    dep_name: Annotated[
        Optional[str],
        typer.Option("--dep-name", help="Dependency name used in diagnostics"),
    ] = None,
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", help="Policy file (YAML, JSON or TOML)"),
    ] = None,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format (text, json)"),
    ] = "text",
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Log level (debug, info, warning, error)"),
    ] = None,
) -> None:
    """Print the releases that are valid upgrade targets."""
    if format not in OUTPUT_FORMATS:
        typer.echo(
            f"Error: Unknown format '{format}'. Choose from: {', '.join(OUTPUT_FORMATS)}",
            err=True,
        )
        raise typer.Exit(1)

    sources: list[ConfigSource] = [EnvConfigSource()]
    if config_file is not None:
        sources.append(FileConfigSource(config_file, required=True))

    overrides: dict[str, Any] = {
        "versioning": versioning,
        "allowedVersions": allowed_versions,
        "followTag": follow_tag,
        "depName": dep_name,
    }
    if ignore_deprecated:
        overrides["ignoreDeprecated"] = True
    if include_unstable:
        overrides["ignoreUnstable"] = False
    if ignore_latest:
        overrides["respectLatest"] = False

    try:
        settings = load_settings(*sources)
        configure_logging(
            level=log_level or settings.log_level,
            format=settings.log_format,
        )

        policy = load_policy(
            *sources,
            overrides={k: v for k, v in overrides.items() if v is not None},
        )
        release_file = load_release_file(releases_file)
        latest_version = latest or release_file.latest_version

        result = VersionFilter(policy).evaluate(
            current, latest_version, release_file.releases
        )
    except ConfigValidationError as e:
        typer.echo(f"Error: {e.validation_error}: {e.validation_message}", err=True)
        raise typer.Exit(2)
    except (ConfigSourceError, ReleaseDataError, SchemeNotFoundError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if format == "json":
        document = {
            "currentVersion": current,
            "latestVersion": latest_version,
            **result.to_dict(),
        }
        typer.echo(json.dumps(document, indent=2))
    else:
        for version in result.versions:
            typer.echo(version)


@app.command(name="schemes")
def schemes_cmd() -> None:
    """List the available versioning schemes."""
    for scheme in sorted(get_registry(), key=lambda s: s.id):
        typer.echo(f"{scheme.id:<10} {scheme.display_name}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
