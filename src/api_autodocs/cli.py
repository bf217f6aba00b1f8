"""CLI entry point for api-autodocs."""

import json
import logging
from pathlib import Path

import click
import yaml

from api_autodocs.config import AutoDocsOptions, build_options, load_options
from api_autodocs.errors import AutoDocsError
from api_autodocs.service import AutoDocsService


def _load(source_path: Path, config_path: Path | None, **overrides) -> AutoDocsOptions:
    """Read options from the config file (if any) and point them at ``source_path``."""
    overrides["source_path"] = str(source_path)
    if config_path is not None:
        return load_options(config_path, **overrides)
    return build_options(**overrides)


def _scan(options: AutoDocsOptions) -> AutoDocsService:
    service = AutoDocsService(options)
    try:
        service.initialize()
    except AutoDocsError as e:
        raise click.ClickException(str(e)) from e
    return service


def _dump(document: dict, fmt: str) -> str:
    if fmt == "json":
        return json.dumps(document, indent=2, ensure_ascii=False) + "\n"
    return yaml.safe_dump(document, sort_keys=False, allow_unicode=True)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show scan progress logs.")
def main(verbose: bool):
    """API AutoDocs — generate OpenAPI documents from annotated controllers."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("source_path", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the OpenAPI document.")
@click.option("-c", "--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML config file.")
@click.option("--format", "fmt", default="auto", type=click.Choice(["auto", "json", "yaml"]), help="Output format.")
@click.option("--title", default=None, help="API title.")
@click.option("--prefix", "global_prefix", default=None, help="Global path prefix, e.g. /api.")
def generate(source_path: Path, output: Path, config_path: Path | None, fmt: str, title: str | None, global_prefix: str | None):
    """Scan SOURCE_PATH and write the OpenAPI document."""
    try:
        options = _load(source_path, config_path, title=title, global_prefix=global_prefix)
    except AutoDocsError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Scanning {source_path}...")
    service = _scan(options)
    stats = service.get_stats()
    click.echo(f"Found {stats['total_controllers']} controllers, {stats['total_routes']} routes.")

    if fmt == "auto":
        fmt = "json" if output.suffix.lower() == ".json" else "yaml"

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(_dump(service.get_spec(), fmt), encoding="utf-8")
    click.echo(f"OpenAPI document saved to {output}")


@main.command()
@click.argument("source_path", type=click.Path(exists=True, path_type=Path))
@click.option("-c", "--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML config file.")
def categories(source_path: Path, config_path: Path | None):
    """List the categories found in SOURCE_PATH with their controllers."""
    try:
        options = _load(source_path, config_path)
    except AutoDocsError as e:
        raise click.ClickException(str(e)) from e

    service = _scan(options)
    grouped = service.get_controllers_by_category()
    for category in sorted(grouped):
        names = ", ".join(c.name for c in grouped[category])
        click.echo(f"{category}: {names}")


@main.command()
@click.argument("source_path", type=click.Path(exists=True, path_type=Path))
@click.option("-c", "--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML config file.")
def stats(source_path: Path, config_path: Path | None):
    """Print scan statistics for SOURCE_PATH."""
    try:
        options = _load(source_path, config_path)
    except AutoDocsError as e:
        raise click.ClickException(str(e)) from e

    service = _scan(options)
    result = service.get_stats()
    click.echo(f"Controllers: {result['total_controllers']}")
    click.echo(f"Routes: {result['total_routes']}")
    click.echo(f"Categories: {result['total_categories']}")
    for category in result["categories"]:
        click.echo(f"  - {category}")
