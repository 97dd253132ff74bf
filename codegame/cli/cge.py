"""cli commands related to CGE versions and cg-gen-events"""

import sys

import click

from codegame.cli.utils.logging import logger
from codegame.external.exceptions import ExternalError, InvalidSchemaError, TagNotFoundError


@click.group(name="cge")
@click.pass_context
def cge(ctx):
    """Resolve CGE versions and manage cg-gen-events."""
    ctx.ensure_object(dict)


@cge.command(name="latest")
def latest():
    """Print the latest CGE version."""
    from codegame.cggenevents import latest_cge_version

    try:
        click.echo(latest_cge_version())
    except ExternalError as e:
        logger.error(str(e))
        sys.exit(1)


@cge.command(name="version", no_args_is_help=True)
@click.argument("cge_file", type=click.Path(exists=True, dir_okay=False))
def version(cge_file):
    """Print the version declared in CGE_FILE."""
    from codegame.cggenevents import parse_cge_version

    try:
        with open(cge_file, "r", encoding="utf-8") as fh:
            content = fh.read()
    except UnicodeDecodeError as e:
        logger.error(f"{cge_file}: not a UTF-8 text file ({e})")
        sys.exit(1)

    try:
        click.echo(parse_cge_version(content))
    except InvalidSchemaError as e:
        logger.error(f"{cge_file}: {e}")
        sys.exit(1)


@cge.command(name="install", no_args_is_help=True)
@click.argument("cge_version")
def install(cge_version):
    """Install the cg-gen-events release matching CGE_VERSION."""
    from codegame.cggenevents import install_cg_gen_events
    from codegame.config import Dirs

    dirs = Dirs.default()
    try:
        exe_name = install_cg_gen_events(cge_version, dirs=dirs)
    except TagNotFoundError:
        logger.error(
            f"No cg-gen-events release for CGE version {cge_version}. "
            "Run `codegame cge latest` to see the newest version."
        )
        sys.exit(1)
    except ExternalError as e:
        logger.error(str(e))
        sys.exit(1)

    click.echo(str(dirs.cg_gen_events_dir / exe_name))


@cge.command(name="library", no_args_is_help=True)
@click.argument("owner")
@click.argument("repo")
@click.argument("cg_version")
def library(owner, repo, cg_version):
    """Print the client library version of OWNER/REPO compatible with CG_VERSION."""
    from codegame.external.github import library_version_from_cg_version

    click.echo(library_version_from_cg_version(owner, repo, cg_version))
