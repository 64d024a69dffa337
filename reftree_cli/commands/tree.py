"""Tree command."""

from pathlib import Path
from typing import Optional, Tuple

import click

from reftree_engine.errors import TreeBuildError
from reftree_engine.export import TreeFormat, dump_tree, write_tree
from reftree_engine.models import coerce_entity_id
from reftree_engine.store.site import load_site
from reftree_cli.config import load_settings
from reftree_cli.context import create_builder


@click.command()
@click.argument("site_path", type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path))
@click.argument("bundle_id")
@click.option("--lang", "langcode", default="en", show_default=True, help="Language of the node labels")
@click.option("--user", help="Account to build the tree as (anonymous if omitted)")
@click.option("--selected", multiple=True, help="ID of an initially selected node (repeatable)")
@click.option(
    "--format",
    "fmt",
    type=click.Choice([f.value for f in TreeFormat]),
    default=TreeFormat.nodes.value,
    show_default=True,
    help="Output format",
)
@click.option("--parent-field", help="Explicit parent field name")
@click.option("--output", type=click.Path(path_type=Path), help="Write the tree to a file instead of stdout")
def tree(
    site_path: Path,
    bundle_id: str,
    langcode: str,
    user: Optional[str],
    selected: Tuple[str, ...],
    fmt: str,
    parent_field: Optional[str],
    output: Optional[Path],
):
    """Build the tree of a bundle."""
    try:
        site = load_site(site_path)
        settings = load_settings(parent_field=parent_field)
        builder = create_builder(site, settings, user=user, langcode=langcode)
        nodes = builder.load_tree(site.entity_type, bundle_id)
    except TreeBuildError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        raise click.Abort()

    selected_ids = [coerce_entity_id(s) for s in selected]

    if output:
        write_tree(nodes, output, TreeFormat(fmt), selected_ids)
        click.echo(f"✅ Wrote {len(nodes)} nodes to {output}")
    else:
        click.echo(dump_tree(nodes, TreeFormat(fmt), selected_ids))
