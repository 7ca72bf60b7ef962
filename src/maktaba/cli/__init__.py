# ABOUTME: CLI package for Maktaba, built on Click.
# ABOUTME: Defines the root command group, sets up logging, and registers subcommands.

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from maktaba.cli.commands import (
    delete_cmd,
    download_cmd,
    import_cmd,
    info_cmd,
    ls_cmd,
    prefs_cmd,
    read_cmd,
    search_cmd,
)

_LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def _configure_logging(verbosity: int) -> None:
    level = _LOG_LEVELS.get(verbosity, logging.DEBUG)
    root = logging.getLogger("maktaba")
    root.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        root.addHandler(
            RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=False)
        )


@click.group()
@click.version_option(package_name="maktaba")
@click.option(
    "-v", "--verbose",
    count=True,
    help="Log more detail (-v for progress, -vv for debug).",
)
def cli(verbose: int) -> None:
    """Maktaba - an offline reader and search engine for Arabic hadith books."""
    _configure_logging(verbose)


cli.add_command(import_cmd.import_command)
cli.add_command(ls_cmd.ls)
cli.add_command(info_cmd.info)
cli.add_command(info_cmd.stats)
cli.add_command(read_cmd.read)
cli.add_command(search_cmd.search)
cli.add_command(delete_cmd.delete)
cli.add_command(delete_cmd.clear)
cli.add_command(download_cmd.available)
cli.add_command(download_cmd.download)
cli.add_command(prefs_cmd.prefs)
