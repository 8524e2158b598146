"""
Configuration management package for Playlist-Archiver

1. Settings Management (settings.py):
   - YAML settings, config.json credentials, environment overrides
2. Authentication Management (auth.py, token.py):
   - OAuth2 authorization code flow with a one-shot local callback
   - Token storage, validation, and refresh

Usage:

    from playlist_archiver.config import get_settings, get_auth

    settings = get_settings()
    auth = get_auth()
"""

from .settings import get_settings, reload_settings, Settings
from .token import Token
from .auth import get_auth, reset_auth, SpotifyAuth

__all__ = [
    # Settings management
    'get_settings',
    'reload_settings',
    'Settings',

    # Authentication management
    'get_auth',
    'reset_auth',
    'SpotifyAuth',
    'Token',
]
