"""codegame CLI"""

import click

from codegame import __version__
from codegame.cli.cge import cge
from codegame.cli.config import config

from .debug import add_debug_option


@click.group()
@click.version_option(__version__, prog_name="codegame")
@click.pass_context
def cli(ctx):
    """
    CodeGame helper tools.
    """
    ctx.ensure_object(dict)


cli.add_command(add_debug_option(cge))
cli.add_command(add_debug_option(config))

add_debug_option(cli)

if __name__ == "__main__":
    cli(obj={})
