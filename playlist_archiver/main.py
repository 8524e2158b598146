"""
Main CLI interface for Playlist-Archiver

This module provides the command-line interface for archiving Spotify
playlists as JSON. It is the primary entry point for user interactions
with the application.

The CLI is built using Click framework and provides structured command groups for:
- Playlist operations (list, download, download-all, create-clean-all, show-info)
- Authentication handling (login, logout, status)
- Configuration inspection (show)
"""

import sys
import click
import functools

from . import __version__
from .archive.cleaner import PlaylistCleaner
from .archive.downloader import PlaylistArchiver
from .config.settings import get_settings, reload_settings
from .config.auth import get_auth, reset_auth
from .spotify.client import get_spotify_client, reset_spotify_client
from .utils.logger import configure_from_settings, get_logger, get_current_log_file
from .utils.helpers import format_duration


logger = get_logger(__name__)


def print_banner():
    """
    Print application banner to console
    """
    banner = """
╔═══════════════════════════════════════════════════════════════╗
║                       Playlist-Archiver                       ║
║                                                               ║
║        Archive your Spotify playlists as local JSON           ║
║                                                               ║
╚═══════════════════════════════════════════════════════════════╝
    """
    click.echo(click.style(banner, fg='green', bold=True))


def handle_error(func):
    """
    Decorator to handle common CLI errors gracefully

    Wraps CLI command functions to provide consistent error handling across
    all commands: every failure is logged, printed in red on stderr, and
    turned into exit status 1. Ctrl-C exits with 130.

    Args:
        func: The CLI command function to wrap

    Returns:
        Wrapped function with error handling
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'))
            sys.exit(130)  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Command failed: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
    return wrapper


def _user_display_name() -> str:
    user_info = get_spotify_client().get_current_user()
    return user_info.get('display_name') or user_info.get('id', 'Unknown')


# Main CLI group - root command that all subcommands attach to
@click.group(invoke_without_command=True)
@click.version_option(__version__, '--version', message='Playlist-Archiver v%(version)s', help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', type=click.Path(), help='Path to config file')
@click.pass_context
@handle_error
def cli(ctx, verbose, config):
    """
    Playlist-Archiver - Archive Spotify playlists as JSON

    Downloads the complete track listing of your playlists and turns it into
    a compact, flattened form that is easy to read or diff.
    """
    ctx.ensure_object(dict)

    if config:
        reload_settings(config)
        reset_auth()
        reset_spotify_client()

    ctx.obj['verbose'] = verbose
    configure_from_settings(verbose=verbose)
    if config:
        logger.info(f"Loaded config: {config}")

    if ctx.invoked_subcommand is None:
        print_banner()
        click.echo(ctx.get_help())


# Playlist operations
@cli.group()
def playlists():
    """
    Playlist archive commands

    Every command except create-clean-all talks to Spotify and will ask
    you to log in when no valid token is stored.
    """
    pass


@playlists.command('list')
@handle_error
def list_playlists():
    """List every playlist of the current user"""
    archiver = PlaylistArchiver()
    click.echo("Playlists:")
    for playlist in archiver.list_playlists():
        click.echo(f"- {playlist.name} (ID: {playlist.id})")


@playlists.command()
@click.argument('playlist_name')
@handle_error
def download(playlist_name):
    """
    Download a playlist by name

    The name is matched case-insensitively. All items are fetched before
    anything is written, so a failure never leaves a partial file.
    """
    archiver = PlaylistArchiver()
    path = archiver.download_playlist(playlist_name)
    click.echo(f"Playlist '{playlist_name}' saved to: {path}")


@playlists.command('download-all')
@handle_error
def download_all():
    """
    Download every playlist of the current user

    Failing playlists are reported at the end; the others are still saved.
    """
    archiver = PlaylistArchiver()
    summary = archiver.download_all()

    click.echo(f"\nDownload Results:")
    click.echo(f"   Downloaded: {len(summary.downloaded)}/{summary.total}")
    if summary.duration is not None:
        click.echo(f"   Duration: {format_duration(summary.duration)}")
    click.echo(f"\nFiles saved to: {archiver.downloads_dir}")

    if not summary.success:
        click.echo(click.style(f"\nFailed playlists ({len(summary.failed)}):", fg='red'), err=True)
        for playlist_id, error in summary.failed.items():
            click.echo(click.style(f"   - {summary.names.get(playlist_id, playlist_id)}: {error}", fg='red'), err=True)
        sys.exit(1)


@playlists.command('create-clean-all')
@handle_error
def create_clean_all():
    """
    Create cleaned copies of every downloaded playlist

    Works offline: reads the downloads directory and writes one flattened
    file per playlist into the cleaned directory.
    """
    cleaner = PlaylistCleaner()
    count = cleaner.clean_all()
    click.echo(f"Cleaned {count} playlists into: {cleaner.cleaned_dir}")


@playlists.command('show-info')
@click.argument('playlist_name')
@handle_error
def show_info(playlist_name):
    """
    Show details about a playlist and its local copies
    """
    info = PlaylistArchiver().show_info(playlist_name)
    playlist = info.playlist

    click.echo(f"Playlist: {playlist.name}")
    click.echo(f"   ID: {playlist.id}")
    click.echo(f"   Owner: {playlist.owner_name or playlist.owner_id}")
    click.echo(f"   Tracks on Spotify: {playlist.total_tracks}")
    if playlist.description:
        click.echo(f"   Description: {playlist.description}")
    if playlist.url:
        click.echo(f"   URL: {playlist.url}")

    click.echo("\nLocal archive:")
    if info.is_downloaded:
        up_to_date = "up to date" if info.is_up_to_date else "out of date"
        click.echo(f"   Downloaded: {info.raw_items} tracks ({up_to_date})")
        click.echo(f"   Total duration: {format_duration(info.duration_ms / 1000)}")
        click.echo(f"   File: {info.raw_path}")
    else:
        click.echo("   Downloaded: No")

    if info.is_cleaned:
        click.echo(f"   Cleaned: {info.cleaned_items} tracks")
        click.echo(f"   File: {info.cleaned_path}")
    else:
        click.echo("   Cleaned: No")


# Authentication commands
@cli.group()
def auth():
    """
    Authentication commands

    Manage the Spotify login: authorize the application, check the stored
    token, or remove it.
    """
    pass


@auth.command()
@handle_error
def login():
    """
    Authenticate with Spotify

    Prints the authorization URL and waits for the browser to come back to
    the local callback address. Does nothing when a valid token is stored.
    """
    auth_manager = get_auth()

    if auth_manager.is_authenticated():
        click.echo(f"Already authenticated as: {_user_display_name()}")
        return

    click.echo("Starting Spotify authentication...")
    auth_manager.get_valid_token()
    click.echo(f"Successfully authenticated as: {_user_display_name()}")


@auth.command()
@handle_error
def logout():
    """
    Remove stored authentication
    """
    auth_manager = get_auth()
    removed = auth_manager.revoke_token()
    reset_auth()
    reset_spotify_client()

    if removed:
        click.echo("Successfully logged out")
    else:
        click.echo("No stored token found")


@auth.command()
@handle_error
def status():
    """
    Show authentication status
    """
    auth_manager = get_auth()
    settings = get_settings()

    if auth_manager.is_authenticated():
        token = auth_manager.stored_token()
        user_info = get_spotify_client().get_current_user()
        click.echo("Authentication Status: Authenticated")
        click.echo(f"   User: {user_info.get('display_name') or user_info.get('id', 'Unknown')}")
        click.echo(f"   Country: {user_info.get('country', 'Unknown')}")
        if token and token.expiry:
            click.echo(f"   Token expires: {token.expiry.isoformat()}")
        if token and token.scope:
            click.echo(f"   Scope: {token.scope}")
    else:
        click.echo("Authentication Status: Not authenticated")
        if not settings.has_credentials():
            click.echo(f"   No client credentials found in {settings.get_credentials_path()}")
        click.echo("   Run 'playlist-archiver auth login' to authenticate")


# Configuration commands
@cli.group()
def config():
    """
    Configuration commands
    """
    pass


@config.command()
@handle_error
def show():
    """
    Show current configuration

    Client secrets are never printed, only whether they are set.
    """
    settings = get_settings()

    click.echo("Current Configuration:\n")

    click.echo("Spotify:")
    click.echo(f"   Client credentials: {'set' if settings.has_credentials() else 'missing'}")
    click.echo(f"   Redirect URL: {settings.spotify.redirect_url}")
    click.echo(f"   Scope: {settings.spotify.scope}")
    click.echo(f"   Authorization timeout: {settings.spotify.auth_timeout}s")
    click.echo(f"   Page size: {settings.spotify.page_size}")

    click.echo("\nStorage:")
    click.echo(f"   Credentials file: {settings.get_credentials_path()}")
    click.echo(f"   Token file: {settings.get_token_storage_path()}")
    click.echo(f"   Downloads directory: {settings.get_downloads_directory()}")
    click.echo(f"   Cleaned directory: {settings.get_cleaned_directory()}")

    click.echo("\nLogging:")
    click.echo(f"   Level: {settings.logging.level}")
    current_log = get_current_log_file()
    click.echo(f"   File: {current_log if current_log else 'Console only'}")

    issues = settings.validate()
    if issues:
        click.echo(f"\nFound {len(issues)} issues:")
        for issue in issues:
            click.echo(f"   • {issue}")


# Entry point for module execution
if __name__ == '__main__':
    cli()
