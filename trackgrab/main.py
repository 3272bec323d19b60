"""
Main CLI interface for trackgrab

Running `trackgrab` with no subcommand shows the banner and starts the
interactive prompt. Each line is classified and handed to the Session:

    yt <keywords|url>     search and download from YouTube
    spotify <playlist>    download a Spotify playlist through YouTube
    exit                  quit

The same commands are available one-shot as `trackgrab yt ...` and
`trackgrab spotify ...` for scripting.
"""

import sys
import functools
from typing import Callable, List, Optional

import click

from . import __version__
from .config.settings import Settings, get_settings, reload_settings
from .dispatch.commands import USAGE, classify_parts
from .dispatch.session import Session
from .exceptions import ConfigError
from .models import TrackOutcome
from .utils.logger import configure_from_settings, get_current_log_file, get_logger


logger = get_logger(__name__)


def print_banner():
    """Print application banner to console"""
    banner = """
╔═══════════════════════════════════════════════════════════════╗
║                           trackgrab                           ║
║                                                               ║
║     Download YouTube videos and Spotify playlists as audio    ║
║                                                               ║
╚═══════════════════════════════════════════════════════════════╝
    """
    click.echo(click.style(banner, fg='green', bold=True))


def handle_error(func):
    """
    Decorator to handle common CLI errors gracefully

    Ctrl-C exits with 130, any other uncaught error is logged and exits
    with 1.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'))
            sys.exit(130)
        except Exception as e:
            logger.debug(f"Command failed: {e}", exc_info=True)
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
    return wrapper


def create_session(settings: Settings) -> Session:
    """
    Validate settings and build the session used by every command

    Raises:
        ConfigError: If a setting has an unsupported value
    """
    issues = settings.validate()
    if issues:
        raise ConfigError(f"Invalid configuration: {'; '.join(issues)}", details={'issues': issues})

    session = Session(settings)
    session.prepare_output_directory()
    return session


def _read_prompt_line() -> str:
    return click.prompt('', prompt_suffix='> ', default='', show_default=False)


def prompt_loop(session: Session, read_line: Optional[Callable[[], str]] = None) -> None:
    """
    Read commands until `exit` or end of input

    Args:
        session: Session that runs each command
        read_line: Line source, click.prompt by default
    """
    read_line = read_line or _read_prompt_line

    logger.console_info(USAGE)
    while session.running:
        try:
            line = read_line()
        except (EOFError, click.Abort):
            break

        try:
            session.handle_line(line)
        except Exception as e:
            # Errors a handler did not report itself
            logger.console_error(f"Error: {e}")
            logger.debug(f"Command failed: {line}", exc_info=True)

    logger.info("Prompt closed")


def _exit_code(outcomes: List[TrackOutcome]) -> int:
    return 0 if all(outcome.ok for outcome in outcomes) else 1


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', type=click.Path(), help='Path to config file')
@click.option('--output', '-o', type=click.Path(), help='Output directory')
@click.pass_context
@handle_error
def cli(ctx, version, verbose, config, output):
    """
    trackgrab - Download music from YouTube and Spotify playlists

    Without a subcommand, starts the interactive prompt.
    """
    ctx.ensure_object(dict)

    if version:
        click.echo(f"trackgrab v{__version__}")
        sys.exit(0)

    settings = reload_settings(config) if config else get_settings()
    if output:
        settings.download.output_directory = output

    configure_from_settings(settings, verbose=verbose)
    if config:
        logger.console_info(f"Loaded config: {config}")
    logger.debug(f"Using {settings}: {settings.to_dict()}")
    log_file = get_current_log_file()
    if log_file:
        logger.debug(f"Log file: {log_file}")

    ctx.obj['settings'] = settings

    if ctx.invoked_subcommand is None:
        print_banner()
        prompt_loop(create_session(settings))


@cli.command()
@click.argument('words', nargs=-1, required=True)
@click.pass_context
@handle_error
def yt(ctx, words):
    """
    Download from YouTube by keywords, video URL or playlist URL
    """
    session = create_session(ctx.obj['settings'])
    outcomes = session.dispatch(classify_parts('yt', words))
    sys.exit(_exit_code(outcomes))


@cli.command()
@click.argument('playlist_url')
@click.pass_context
@handle_error
def spotify(ctx, playlist_url):
    """
    Download every track of a Spotify playlist
    """
    session = create_session(ctx.obj['settings'])
    outcomes = session.dispatch(classify_parts('spotify', [playlist_url]))
    if not session.spotify.validate_playlist_url(playlist_url):
        sys.exit(1)
    sys.exit(_exit_code(outcomes))


# Entry point for module execution
if __name__ == '__main__':
    cli()
