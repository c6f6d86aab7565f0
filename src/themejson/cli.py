"""
themejson CLI.

Compiles theme files into stylesheets and inspects compiled trees.
Block types and stylesheet defaults come from themejson.toml, found in
the current directory or a parent, or passed with --manifest.
"""

from __future__ import annotations

import json
import logging
import os
import platform
import sys
from pathlib import Path
from typing import Any, NoReturn

import typer

from themejson._version import get_version
from themejson.core.errors import ThemeJSONError
from themejson.core.loader import load_merged_theme, load_theme_data
from themejson.core.manifest import CompilerManifest, find_manifest, load_manifest
from themejson.core.presets import Origin
from themejson.core.registry import BlockMetadataCache, BlockTypeRegistry
from themejson.core.theme_json import ThemeJSON

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "THEMEJSON_LOG_LEVEL"


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"themejson version {get_version()}")
        typer.echo("")
        typer.echo("Environment:")
        typer.echo(f"  Python:        {platform.python_implementation()} {platform.python_version()}")
        typer.echo(f"  Platform:      {platform.system()} {platform.release()}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else os.getenv(LOG_LEVEL_ENV, "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


# =============================================================================
# Main Application
# =============================================================================

app = typer.Typer(
    help="""themejson - compile theme trees into CSS

Commands:
  • stylesheet    Custom properties, block styles and preset classes
  • svg-filters   SVG markup for duotone presets
  • settings      Compiled settings as JSON
  • templates     Custom templates and template parts
  • sanitize      Strip unsafe styles and presets from an untrusted tree
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """themejson CLI main callback for global options."""
    configure_logging(verbose)


# =============================================================================
# Shared options
# =============================================================================

DefaultOption = typer.Option(None, "--default", help="Core defaults tree (lowest precedence)")
ThemeOption = typer.Option(None, "--theme", "-t", help="Theme tree")
CustomOption = typer.Option(None, "--custom", help="User customizations (highest precedence)")
ManifestOption = typer.Option(None, "--manifest", "-m", help="Path to themejson.toml")


def _load_context(manifest_path: Path | None) -> tuple[CompilerManifest, BlockMetadataCache]:
    """Load the manifest and a block metadata cache for its blocks."""
    if manifest_path is None:
        manifest_path = find_manifest(Path.cwd())

    manifest = load_manifest(manifest_path) if manifest_path else CompilerManifest()
    if manifest_path:
        logger.debug(f"Using manifest {manifest_path}")

    registry = BlockTypeRegistry()
    manifest.register_blocks(registry)
    return manifest, BlockMetadataCache(registry)


def _load_merged(
    default: Path | None,
    theme: Path | None,
    custom: Path | None,
    blocks_metadata: BlockMetadataCache,
) -> ThemeJSON:
    sources = [
        (path, origin)
        for path, origin in (
            (default, Origin.DEFAULT),
            (theme, Origin.THEME),
            (custom, Origin.CUSTOM),
        )
        if path is not None
    ]
    if not sources:
        typer.echo("Provide at least one of --default, --theme or --custom", err=True)
        raise typer.Exit(code=1)
    return load_merged_theme(sources, blocks_metadata=blocks_metadata)


def _fail(error: ThemeJSONError) -> NoReturn:
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(code=1)


def _write(text: str, output: Path | None) -> None:
    if output is None:
        typer.echo(text)
    else:
        output.write_text(text, encoding="utf-8")
        typer.echo(f"✓ Wrote {output}", err=True)


def _dump_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


# =============================================================================
# Commands
# =============================================================================


@app.command("stylesheet")
def stylesheet_command(
    default: Path | None = DefaultOption,
    theme: Path | None = ThemeOption,
    custom: Path | None = CustomOption,
    types: list[str] | None = typer.Option(
        None, "--type", help="Section to emit: variables, styles or presets (repeatable)"
    ),
    origins: list[str] | None = typer.Option(
        None, "--origin", help="Origin whose presets are included (repeatable)"
    ),
    manifest: Path | None = ManifestOption,
    output: Path | None = typer.Option(None, "--output", "-o", help="Write CSS to this file"),
) -> None:
    """Compile the merged theme trees into a stylesheet."""
    try:
        config, blocks_metadata = _load_context(manifest)
        merged = _load_merged(default, theme, custom, blocks_metadata)
    except ThemeJSONError as e:
        _fail(e)

    css = merged.get_stylesheet(
        types or config.stylesheet.types,
        origins or config.stylesheet.origins,
    )
    _write(css, output)


@app.command("svg-filters")
def svg_filters_command(
    default: Path | None = DefaultOption,
    theme: Path | None = ThemeOption,
    custom: Path | None = CustomOption,
    manifest: Path | None = ManifestOption,
    output: Path | None = typer.Option(None, "--output", "-o", help="Write SVG to this file"),
) -> None:
    """Render the SVG filters for every duotone preset."""
    try:
        config, blocks_metadata = _load_context(manifest)
        merged = _load_merged(default, theme, custom, blocks_metadata)
    except ThemeJSONError as e:
        _fail(e)

    _write(merged.get_svg_filters(config.stylesheet.origins), output)


@app.command("settings")
def settings_command(
    default: Path | None = DefaultOption,
    theme: Path | None = ThemeOption,
    custom: Path | None = CustomOption,
    manifest: Path | None = ManifestOption,
) -> None:
    """Print the merged settings, presets keyed by origin, as JSON."""
    try:
        _config, blocks_metadata = _load_context(manifest)
        merged = _load_merged(default, theme, custom, blocks_metadata)
    except ThemeJSONError as e:
        _fail(e)

    typer.echo(_dump_json(merged.get_settings()))


@app.command("templates")
def templates_command(
    theme: Path = typer.Argument(..., help="Theme tree"),
    manifest: Path | None = ManifestOption,
) -> None:
    """List the custom templates and template parts a theme declares."""
    try:
        _config, blocks_metadata = _load_context(manifest)
        compiled = ThemeJSON(load_theme_data(theme), blocks_metadata=blocks_metadata)
    except ThemeJSONError as e:
        _fail(e)

    data = {
        "customTemplates": {
            name: template.model_dump(by_alias=True)
            for name, template in compiled.get_custom_templates().items()
        },
        "templateParts": {
            name: part.model_dump() for name, part in compiled.get_template_parts().items()
        },
    }
    typer.echo(_dump_json(data))


@app.command("sanitize")
def sanitize_command(
    path: Path = typer.Argument(..., help="Untrusted theme tree"),
    manifest: Path | None = ManifestOption,
    output: Path | None = typer.Option(None, "--output", "-o", help="Write JSON to this file"),
) -> None:
    """Strip styles and presets that are not safe to emit."""
    try:
        _config, blocks_metadata = _load_context(manifest)
        data = load_theme_data(path)
    except ThemeJSONError as e:
        _fail(e)

    safe = ThemeJSON.remove_insecure_properties(data, blocks_metadata=blocks_metadata)
    _write(_dump_json(safe), output)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


if __name__ == "__main__":
    main(sys.argv[1:])
