"""Command Line Interface for MangaBind.

This module provides the CLI for exporting manga sections to EPUB and
for checking the produced files.
"""

import logging
import click

from . import __version__
from .config import Config, DEFAULT_CONFIG
from .error import initialize_error_handler, error_handler, ErrorCategory, MangaBindError
from .models import Platform
from .ui import (
    print_header,
    print_info,
    print_section_title,
    print_success,
    print_warning,
    ColorfulFormatter,
)
from .workflow import build_section, export_section, inspect_epub, validate_epub

# Set up logging
logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__)
@click.option('--debug', is_flag=True, help="Enable debug logging")
@click.option('--log-dir', help="Directory for log files")
@click.pass_context
def cli(ctx, debug, log_dir):
    """MangaBind: Package manga chapters as EPUB files.

    Each image becomes one page of the book, preceded by an attribution
    page naming the site the images came from.

    Basic usage:
      - Export a chapter: mangabind export "Demo Ch1" URL [URL ...]
      - Inspect a package: mangabind inspect "output/Demo Ch1.epub"
      - Validate a package: mangabind validate "output/Demo Ch1.epub"
    """
    ctx.ensure_object(dict)

    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    ctx.obj['DEBUG'] = debug
    initialize_error_handler(debug=debug, log_dir=log_dir)


@cli.command()
@click.argument('name')
@click.argument('urls', nargs=-1, required=True)
@click.option('--output', '-o', help="Output directory")
@click.option('--platform-name', default="Unknown", help="Name of the source site")
@click.option('--platform-url', default="", help="Base URL of the source site")
@click.option('--source-url', default="", help="URL of the chapter page")
@click.pass_context
def export(ctx, name, urls, output, platform_name, platform_url, source_url):
    """Export the images at URLS as an EPUB named NAME.

    Images are added in the given order; the first one is also the cover.

    Examples:
      mangabind export "Demo Ch1" https://example.org/1.jpg https://example.org/2.jpg
    """
    section = build_section(name, list(urls), source_url)
    platform = Platform(platform_name, platform_url)

    print_section_title(section.name)
    try:
        dst_file = export_section(section, platform, output_dir=output, config=Config())
    except MangaBindError as e:
        error_handler.display_error(error_handler.handle(e))
        ctx.exit(1)

    print_success(f"EPUB written to {dst_file}")


@cli.command()
@click.argument('epub_path', type=click.Path(exists=True, dir_okay=False))
def inspect(epub_path):
    """Show the metadata and contents of an EPUB file.

    EPUB_PATH is the path to the EPUB file to inspect.
    """
    summary = inspect_epub(epub_path)

    print_header(summary["title"] or epub_path)
    click.echo(f"Identifier: {summary['identifier']}")
    click.echo(f"Documents:  {summary['documents']}")
    click.echo(f"Images:     {summary['images']}")
    click.echo(f"Spine:      {' '.join(summary['spine'])}")


@cli.command()
@click.argument('epub_path')
@click.pass_context
def validate(ctx, epub_path):
    """Validate an EPUB file with epubcheck.

    EPUB_PATH is the path to the EPUB file to validate.

    Examples:
      mangabind validate "output/Demo Ch1.epub"
    """
    print_info(f"Validating EPUB: {epub_path}")

    result = validate_epub(epub_path)

    if result.get("valid") is True:
        print_success("EPUB is valid!")
        if result.get("output"):
            click.echo(result["output"])
    elif result.get("valid") is False:
        click.echo(ColorfulFormatter.error("EPUB validation failed"))
        if result.get("error"):
            click.echo(f"\nError: {result['error']}")
        if result.get("output"):
            click.echo(result["output"])
        ctx.exit(1)
    else:
        print_warning("Could not validate EPUB")
        click.echo(f"\nReason: {result.get('error')}")
        click.echo("\nTip: Install epubcheck for EPUB validation")


@cli.command(name="config")
@click.argument('key', required=False)
@click.argument('value', required=False)
@click.option('--reset', is_flag=True, help="Restore the default values")
@click.pass_context
def config_command(ctx, key, value, reset):
    """Show or change configuration values.

    Without arguments all values are listed; with KEY only that value is
    shown; with KEY and VALUE the value is stored. --reset restores
    the defaults.

    Examples:
      mangabind config
      mangabind config operator my-bot
    """
    config = Config()

    if reset:
        if config.reset():
            print_success("Configuration reset to defaults")
        else:
            print_warning("Could not save the default configuration")
        return

    if key is None:
        for item_key, item_value in config.items():
            click.echo(f"{item_key} = {item_value}")
        return

    if key not in DEFAULT_CONFIG:
        error = error_handler.handle(
            ValueError(f"Unknown configuration key: {key}"),
            category=ErrorCategory.USER_INPUT
        )
        error_handler.display_error(error)
        ctx.exit(1)

    if value is None:
        click.echo(f"{key} = {config.get(key)}")
        return

    try:
        saved = config.set(key, value)
    except ValueError as e:
        error = error_handler.handle(e, category=ErrorCategory.USER_INPUT)
        error_handler.display_error(error)
        ctx.exit(1)

    if saved:
        print_success(f"{key} = {config.get(key)}")
    else:
        print_warning(f"Could not save {key}")
