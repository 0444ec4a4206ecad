"""
Main CLI interface for lyric-resolver

Command groups:
- lookup: resolve a track/artist pair and print its decoded lyrics
- decode: decode a hex ciphertext or a saved lyric document
- normalize: show how a title and artist string are normalized
- config: show and validate the effective configuration

Exit codes: 0 success, 1 error, 2 not found or invalid request, 130 cancelled.
"""

import functools
import json
import os
import sys
from pathlib import Path

import click

from . import __version__
from .config.overrides import reset_override_table
from .config.settings import get_settings, reload_settings
from .exceptions import InvalidQueryError, LyricResolverError, TrackNotFoundError
from .lyrics.decoder import get_lyric_decoder
from .lyrics.extractor import extract_ciphertext
from .lyrics.filters import qrc_to_lrc
from .matching.normalizer import NormalizedQuery, extract_core_name
from .providers import reset_lyrics_provider, reset_search_provider
from .service import get_lyrics_service, reset_lyrics_service
from .utils.logger import configure_from_settings, get_current_log_file, get_logger, set_console_verbose


# Initialize logging system from configuration settings
configure_from_settings()
logger = get_logger(__name__)

EXIT_NOT_FOUND = 2


def handle_error(func):
    """
    Decorator to handle common CLI errors gracefully

    Maps lyric-resolver exceptions to user-friendly messages and exit codes.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'), err=True)
            sys.exit(130)
        except TrackNotFoundError as e:
            logger.info(f"Not found: {e.details}")
            click.echo(click.style(f"Not found: {e}", fg='yellow'), err=True)
            sys.exit(EXIT_NOT_FOUND)
        except InvalidQueryError as e:
            raise click.UsageError(str(e))
        except LyricResolverError as e:
            logger.error(f"Command failed: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
    return wrapper


def _reset_components() -> None:
    """Drop cached components so they pick up reloaded settings"""
    reset_lyrics_service()
    reset_search_provider()
    reset_lyrics_provider()
    reset_override_table()


# Main CLI group - root command that all subcommands attach to
@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', type=click.Path(), help='Path to config file')
@click.pass_context
def cli(ctx, version, verbose, config):
    """
    lyric-resolver - find a song in the catalog and decode its lyrics
    """
    ctx.ensure_object(dict)

    if version:
        click.echo(f"lyric-resolver v{__version__}")
        return

    if config:
        settings = reload_settings(config)
        configure_from_settings()
        _reset_components()
        for warning in settings.warnings:
            click.echo(click.style(f"Warning: {warning}", fg='yellow'), err=True)

    if verbose:
        ctx.obj['verbose'] = True
        set_console_verbose(True)
        logger.info("Verbose mode enabled")

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument('track')
@click.argument('artist')
@click.option('--json', 'as_json', is_flag=True, help='Print the result as JSON')
@click.option('--no-filter', is_flag=True, help='Keep credits, headers and notices in the lyrics')
@handle_error
def lookup(track, artist, as_json, no_filter):
    """
    Resolve TRACK by ARTIST and print its lyrics

    Example: lyric-resolver lookup "無條件 (Live)" "陳奕迅"
    """
    service = get_lyrics_service()
    result = service.lookup(track, artist, filter_enabled=False if no_filter else None)

    if as_json:
        click.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return

    click.echo(click.style(f"{result.name} - {result.artist_name}", fg='green', bold=True))
    if result.album_name:
        click.echo(f"Album: {result.album_name}")
    click.echo(f"Duration: {result.duration}s")
    click.echo(f"Catalog id: {result.id or result.mid} ({result.source})")

    if result.instrumental:
        click.echo(click.style("\nNo lyrics (instrumental)", fg='yellow'))
        return

    click.echo("")
    click.echo(result.synced_lyrics)

    if result.translated_lyrics:
        click.echo(click.style("\nTranslation:", fg='cyan'))
        click.echo(result.translated_lyrics)


@cli.command()
@click.argument('hex_or_file')
@click.option('--lrc', is_flag=True, help='Convert word-timed QRC lines to LRC')
@handle_error
def decode(hex_or_file, lrc):
    """
    Decode a hex ciphertext or a saved lyric document

    HEX_OR_FILE is either the hex string itself or a path to a file holding
    the hex string or the full XML document returned by the lyric endpoint.
    """
    if os.path.isfile(hex_or_file):
        text = Path(hex_or_file).read_text(encoding="utf-8")
    else:
        text = hex_or_file

    ciphertext = text.strip()
    if '<' in ciphertext:
        ciphertext = extract_ciphertext(ciphertext) or ''
        if not ciphertext:
            click.echo(click.style("No ciphertext found in document", fg='red'), err=True)
            sys.exit(1)

    result = get_lyric_decoder().decode_detailed(ciphertext)
    if not result.ok:
        click.echo(click.style(f"Decoding failed at {result.stage}: {result.error}", fg='red'), err=True)
        sys.exit(1)

    click.echo(qrc_to_lrc(result.value) if lrc else result.value)


@cli.command()
@click.argument('text')
@click.option('--artist', default='', help='Artist string to normalize as well')
def normalize(text, artist):
    """Show how TEXT (a track title) is normalized for matching"""
    query = NormalizedQuery.from_raw(text, artist)

    click.echo(f"Normalized: {query.core_title}")
    click.echo(f"Core name: {extract_core_name(text)}")
    click.echo(f"Variants: {' | '.join(query.title_variants)}")
    if artist:
        click.echo(f"Artists: {' | '.join(query.artists)}")


# Configuration commands group
@cli.group()
def config():
    """Configuration management"""
    pass


@config.command()
def show():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:\n")
    if settings.loaded_from:
        click.echo(f"Loaded from: {settings.loaded_from}\n")

    for section, values in settings.to_dict().items():
        click.echo(f"{section.capitalize()}:")
        for key, value in values.items():
            click.echo(f"   {key}: {value}")
        click.echo("")

    current_log = get_current_log_file()
    click.echo(f"Log file: {current_log if current_log else 'none (console only)'}")


@config.command()
def validate():
    """Validate current configuration"""
    settings = get_settings()
    errors = settings.get_validation_errors()

    for warning in settings.warnings:
        click.echo(click.style(f"Warning: {warning}", fg='yellow'))

    if errors:
        click.echo(click.style(f"Found {len(errors)} problems:", fg='red'))
        for error in errors:
            click.echo(f"   • {error}")
        sys.exit(1)

    click.echo(click.style("Configuration is valid", fg='green'))


# Entry point for module execution
if __name__ == '__main__':
    cli()
