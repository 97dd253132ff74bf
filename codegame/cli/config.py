"""cli commands to inspect and change the user configuration"""

import sys

import click

from codegame.cli.utils.logging import logger
from codegame.config import ConfigAccessor, load_config


@click.group(name="config")
def config():
    """Show or change codegame settings."""
    pass


@config.command(name="show")
def show():
    """Print the effective configuration."""
    accessor = ConfigAccessor()
    cfg = load_config(accessor)
    click.echo(f"config file: {accessor.config_path}")
    click.echo(f"share_url = {cfg.share_url}")
    click.echo(f"dev_port = {cfg.dev_port}")


@config.command(name="set", no_args_is_help=True)
@click.argument("key", type=click.Choice(["share_url", "dev_port"]))
@click.argument("value")
def set_value(key, value):
    """Set KEY to VALUE and save the configuration."""
    accessor = ConfigAccessor()
    cfg = load_config(accessor)

    if key == "dev_port":
        try:
            cfg.dev_port = int(value)
        except ValueError:
            logger.error(f"dev_port must be an integer, got '{value}'")
            sys.exit(1)
    else:
        cfg.share_url = value

    cfg.save(accessor)
    logger.info(f"{key} set to {value}")
