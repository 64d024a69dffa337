"""Fields command."""

from pathlib import Path
from typing import Optional

import click

from reftree_engine.errors import TreeBuildError
from reftree_engine.hierarchy import NO_PARENT, get_parent_resolver
from reftree_engine.schema import SchemaResolver
from reftree_engine.store.site import load_site
from reftree_engine.tree.assembler import TreeAssembler
from reftree_cli.config import load_settings


@click.command()
@click.argument("site_path", type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path))
@click.argument("bundle_id")
@click.option("--parent-field", help="Explicit parent field name")
def fields(site_path: Path, bundle_id: str, parent_field: Optional[str]):
    """Show a bundle's custom fields and the parent inferred for each entity."""
    try:
        site = load_site(site_path)
        settings = load_settings(parent_field=parent_field)
        resolver = SchemaResolver(site.bundle_registry, site.schema_registry)
        bundle, custom_fields = resolver.resolve(site.entity_type, bundle_id)
    except TreeBuildError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        raise click.Abort()

    click.echo(f"📚 Bundle: {bundle.label} ({bundle.id})")
    click.echo(f"   Custom fields (declaration order):")
    for name in custom_fields:
        click.echo(f"     - {name}")

    parent_resolver = get_parent_resolver(settings.parent_field)
    storage = site.storage
    click.echo(f"   Entities:")
    for entity in storage.load_by_properties({storage.bundle_key: bundle.id}):
        values = entity.get_values(storage)
        if not TreeAssembler.is_member(values, custom_fields):
            click.echo(f"     {entity.id}: {entity.label()} - excluded, no custom field values")
            continue

        field_name = parent_resolver.find_parent_field(values, custom_fields)
        parent_id = parent_resolver.resolve_parent(values, custom_fields)
        if parent_id == NO_PARENT:
            click.echo(f"     {entity.id}: {entity.label()} - top level")
        else:
            click.echo(f"     {entity.id}: {entity.label()} - parent {parent_id} via {field_name}")
