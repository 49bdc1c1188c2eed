"""
Parses a reStructuredText file and prints its document tree.
With --lint, reports every diagnostic instead of stopping at the first error.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from .api import parse_file
from .config import ConfigError, build_config
from .exceptions import ParseFileError
from .filesystem import normalize_filepath
from .messages import MessageCollector
from .models import format_tree

__all__ = ["cli"]


@click.command()
@click.version_option()
@click.option("--skip-pounds", is_flag=True, help="Skip leading '#' comment markers")
@click.option("--smilies", is_flag=True, help="Recognise ASCII emoticons")
@click.option("--raw", is_flag=True, help="Allow the raw directive")
@click.option("--markdown", is_flag=True, help="Accept markdown headlines, fences and links")
@click.option("--lint", is_flag=True, help="Report all diagnostics; exit 1 on errors")
@click.option("--verbose", "-v", is_flag=True, help="Log directive dispatch and includes")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def cli(
    filepath: str,
    skip_pounds: bool = False,
    smilies: bool = False,
    raw: bool = False,
    markdown: bool = False,
    lint: bool = False,
    verbose: bool = False,
):
    """
    Entry point for parsing a reStructuredText file.

    Args:
        filepath: Path to the reStructuredText file to parse.
        skip_pounds: Enable skipping of leading ``#`` markers.
        smilies: Enable emoticon recognition.
        raw: Enable the ``raw`` directive.
        markdown: Enable markdown extensions.
        lint: Collect diagnostics instead of aborting on the first error.
        verbose: Emit debug logging.

    Raises:
        click.BadParameter: If the path is rejected or the configuration is
            invalid.
        click.ClickException: If the file cannot be read or parsing fails.

    Examples:
        rstree docs/index.rst --markdown --lint
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    base_dir = Path.cwd().resolve()
    try:
        filepath = normalize_filepath(filepath, base_dir)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error
    try:
        # Flags can only enable features; unset flags defer to the config file.
        config = build_config(
            filepath.parent,
            skip_pounds=skip_pounds or None,
            support_smilies=smilies or None,
            support_raw_directive=raw or None,
            support_markdown=markdown or None,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    collector = MessageCollector() if lint else None
    try:
        result = parse_file(filepath, config, msg_handler=collector)
    except ParseFileError as error:
        raise click.ClickException(str(error)) from error

    click.echo(format_tree(result.document), nl=False)
    if result.has_toc:
        click.echo("has-toc: yes")

    if collector is not None:
        for message in collector.messages:
            click.echo(str(message), err=True)
        if collector.has_errors:
            raise SystemExit(1)


if __name__ == "__main__":
    cli()
