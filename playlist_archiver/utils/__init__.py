"""
Utility modules for Playlist-Archiver
Exceptions, logging, and file helpers shared by every package
"""

from .exceptions import (
    PlaylistArchiverError,
    ConfigError,
    TokenError,
    AuthError,
    ApiError,
    PlaylistNotFoundError,
    StorageError,
)
from .logger import (
    get_logger,
    setup_logging,
    configure_from_settings,
    OperationLogger,
    create_operation_logger,
    get_current_log_file,
)
from .helpers import (
    read_json,
    write_json,
    sanitize_filename,
    playlist_filename,
    normalize_playlist_name,
    ensure_directory,
    format_duration,
)

__all__ = [
    # Exceptions
    'PlaylistArchiverError',
    'ConfigError',
    'TokenError',
    'AuthError',
    'ApiError',
    'PlaylistNotFoundError',
    'StorageError',

    # Logger exports
    'get_logger',
    'setup_logging',
    'configure_from_settings',
    'OperationLogger',
    'create_operation_logger',
    'get_current_log_file',

    # Helper exports
    'read_json',
    'write_json',
    'sanitize_filename',
    'playlist_filename',
    'normalize_playlist_name',
    'ensure_directory',
    'format_duration',
]
