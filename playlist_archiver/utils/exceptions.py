"""
Exception classes for Playlist-Archiver

Every failure the tool can report is one of the classes below, so the CLI
can catch PlaylistArchiverError once and print a clean message instead of
a traceback.

Exception Hierarchy:
    PlaylistArchiverError (base)
        ConfigError - credentials or config file issues
        TokenError - stored token unreadable or malformed
        AuthError - authorization flow failed (state mismatch, denial,
                    code exchange failure, callback timeout)
        ApiError - Spotify Web API call failed
        PlaylistNotFoundError - no playlist with the requested name
        StorageError - reading or writing local JSON files failed
"""

from typing import Any, Dict, Optional


class PlaylistArchiverError(Exception):
    """
    Base exception for all Playlist-Archiver errors

    Attributes:
        message: Human-readable error description
        details: Optional dictionary with additional context (file path,
                 playlist name, HTTP status, wrapped error)
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ConfigError(PlaylistArchiverError):
    """
    Raised when credentials or settings cannot be loaded

    Common causes:
        - config.json is not valid JSON
        - client_id / client_secret missing when authorization is needed
        - config.yaml has invalid YAML syntax
    """
    pass


class TokenError(PlaylistArchiverError):
    """
    Raised when token.json exists but cannot be turned into a token
    """
    pass


class AuthError(PlaylistArchiverError):
    """
    Raised when the OAuth2 authorization flow does not produce a token

    Common causes:
        - callback state parameter does not match the issued one
        - user denied access in the browser
        - authorization code exchange rejected by the token endpoint
        - no callback received before the configured timeout
        - callback port already in use
    """
    pass


class ApiError(PlaylistArchiverError):
    """
    Raised when a Spotify Web API request fails

    Attributes:
        status: HTTP status code when the failure came from an HTTP
                response, None for network-level failures
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status: Optional[int] = None
    ) -> None:
        super().__init__(message, details)
        self.status = status


class PlaylistNotFoundError(PlaylistArchiverError):
    """
    Raised when none of the user's playlists matches the requested name
    """

    def __init__(self, name: str) -> None:
        super().__init__(f"Playlist not found: {name}", details={'playlist_name': name})
        self.name = name


class StorageError(PlaylistArchiverError):
    """
    Raised when a local file cannot be read, parsed, or written

    Example:
        raise StorageError(
            "Invalid JSON in downloads/Gym.json",
            details={'file_path': 'downloads/Gym.json', 'original_error': str(e)}
        )
    """
    pass
