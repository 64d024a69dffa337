"""Config command."""

import json

import click
from pydantic import ValidationError

from reftree_engine.errors import ConfigError
from reftree_cli.config import get_config_path, load_settings, save_setting


@click.group()
def config():
    """Show or change tree settings."""
    pass


@config.command("show")
def show():
    """Show the effective settings."""
    click.echo(f"Config file: {get_config_path()}")
    try:
        settings = load_settings()
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        raise click.Abort()

    click.echo(json.dumps(settings.model_dump(), indent=2))


@config.command("set")
@click.argument("key")
@click.argument("value")
def set_value(key: str, value: str):
    """Persist one setting to the config file."""
    try:
        path = save_setting(key, value)
    except KeyError:
        click.secho(f"❌ Unknown setting: {key}", fg="red", err=True)
        raise click.Abort()
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        raise click.Abort()
    except ValidationError as e:
        click.secho(f"❌ Invalid value for {key}: {e.errors()[0]['msg']}", fg="red", err=True)
        raise click.Abort()

    click.echo(f"✅ {key} saved to {path}")
