"""
Configuration management for Playlist-Archiver

This module handles loading, validation, and management of application settings
from multiple sources including YAML files, the JSON credentials file, and
environment variables.

The configuration is organized into logical sections using dataclasses:
- Spotify API settings (redirect URL, scopes, OAuth callback timeout, paging)
- Storage locations (credentials, token, downloads, cleaned output)
- Logging preferences

Client credentials live in config.json ({"client_id": ..., "client_secret": ...})
and can be overridden by environment variables, which may in turn come from a
.env file.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, asdict
from urllib.parse import urlparse
from dotenv import load_dotenv

from ..utils.exceptions import ConfigError, StorageError
from ..utils.helpers import read_json

# Load environment variables from .env file if present
load_dotenv()


@dataclass
class SpotifyConfig:
    """
    Spotify API configuration and authentication settings

    client_id and client_secret are filled from config.json or the
    environment, never from config.yaml.
    """
    client_id: str = ""
    client_secret: str = ""
    redirect_url: str = "http://127.0.0.1:8080/callback"
    scope: str = "playlist-read-private user-library-read"
    auth_timeout: int = 300
    open_browser: bool = False
    expiry_leeway: int = 10
    page_size: int = 100
    playlists_page_size: int = 50
    request_interval: float = 0.1


@dataclass
class StorageConfig:
    """
    Locations of every file the tool reads or writes

    Relative paths are resolved against the current working directory,
    so running the tool from a project folder keeps everything together.
    """
    credentials_file: str = "config.json"
    token_file: str = "token.json"
    downloads_directory: str = "downloads"
    cleaned_directory: str = "cleaned"


@dataclass
class LoggingConfig:
    """
    Logging configuration and output settings
    """
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True


class Settings:
    """
    Main settings class that manages all configuration

    Loads defaults, then config.yaml, then the credentials file, then
    environment variables, each source overriding the previous one.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize settings from config file or environment variables

        Args:
            config_path: Path to custom config file, if None uses default locations
        """
        self.config_path = config_path
        self.config_dir = Path.home() / ".playlist-archiver"

        self.spotify = SpotifyConfig()
        self.storage = StorageConfig()
        self.logging = LoggingConfig()

        self._load_config()
        self._load_credentials()
        self._load_environment_variables()

    def _load_config(self) -> None:
        """
        Load configuration from YAML file

        The first existing file in the search order wins. An explicit
        --config path that cannot be parsed is an error, the implicit
        locations only produce a warning.
        """
        if self.config_path and not Path(self.config_path).exists():
            raise ConfigError(
                f"Config file not found: {self.config_path}",
                details={'file_path': str(self.config_path)}
            )

        config_paths = [
            self.config_path,
            self.config_dir / "config.yaml",
            Path("config.yaml")
        ]

        config_data = {}
        for path in config_paths:
            if path and Path(path).exists():
                try:
                    with open(path, 'r', encoding='utf-8') as f:
                        config_data = yaml.safe_load(f) or {}
                    break
                except (OSError, yaml.YAMLError) as e:
                    if path == self.config_path:
                        raise ConfigError(
                            f"Failed to load config from {path}: {e}",
                            details={'file_path': str(path)}
                        )
                    print(f"Warning: Failed to load config from {path}: {e}")

        self._apply_config(config_data)

    def _apply_config(self, config_data: Dict[str, Any]) -> None:
        """
        Apply configuration data to dataclass instances

        Only attributes defined on the dataclass are copied; unknown keys
        are ignored. Credentials are never taken from YAML.

        Args:
            config_data: Dictionary containing configuration sections
        """
        config_mapping = {
            'spotify': self.spotify,
            'storage': self.storage,
            'logging': self.logging,
        }

        for section_name, section_data in config_data.items():
            if section_name in config_mapping and isinstance(section_data, dict):
                config_obj = config_mapping[section_name]
                for key, value in section_data.items():
                    if key in ('client_id', 'client_secret'):
                        continue
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)

    def _load_credentials(self) -> None:
        """
        Load client credentials from the JSON credentials file

        A missing file leaves the credentials empty; they may still come
        from the environment.

        Raises:
            ConfigError: If the file exists but is not a JSON object
        """
        path = self.get_credentials_path()
        try:
            data = read_json(path, default={})
        except StorageError as e:
            raise ConfigError(f"Error reading config file {path}: {e}", details={'file_path': str(path)})

        if not isinstance(data, dict):
            raise ConfigError(
                f"Error reading config file {path}: expected a JSON object",
                details={'file_path': str(path)}
            )

        self.spotify.client_id = data.get('client_id', '') or ''
        self.spotify.client_secret = data.get('client_secret', '') or ''

    def _load_environment_variables(self) -> None:
        """
        Load sensitive configuration from environment variables

        Environment variables take precedence over file-based configuration.
        """
        env_mappings = {
            'SPOTIFY_CLIENT_ID': lambda v: setattr(self.spotify, 'client_id', v),
            'SPOTIFY_CLIENT_SECRET': lambda v: setattr(self.spotify, 'client_secret', v),
            'SPOTIFY_REDIRECT_URL': lambda v: setattr(self.spotify, 'redirect_url', v),
            'PLAYLIST_ARCHIVER_DOWNLOADS': lambda v: setattr(self.storage, 'downloads_directory', v),
            'PLAYLIST_ARCHIVER_CLEANED': lambda v: setattr(self.storage, 'cleaned_directory', v),
        }

        for env_var, setter in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                setter(value)

    def get_credentials_path(self) -> Path:
        return Path(self.storage.credentials_file).expanduser()

    def get_token_storage_path(self) -> Path:
        return Path(self.storage.token_file).expanduser()

    def get_downloads_directory(self) -> Path:
        return Path(self.storage.downloads_directory).expanduser()

    def get_cleaned_directory(self) -> Path:
        return Path(self.storage.cleaned_directory).expanduser()

    def get_config_directory(self) -> Path:
        return self.config_dir

    def has_credentials(self) -> bool:
        return bool(self.spotify.client_id and self.spotify.client_secret)

    def save_config(self, path: Optional[str] = None) -> Path:
        """
        Save current configuration to a YAML file

        Credentials are blanked before writing; they belong in config.json.

        Args:
            path: Custom path to save config, defaults to user config directory

        Returns:
            Path of the written file

        Raises:
            ConfigError: If the configuration cannot be saved
        """
        target = Path(path) if path else self.get_config_directory() / "config.yaml"

        config_data = {
            'spotify': asdict(self.spotify),
            'storage': asdict(self.storage),
            'logging': asdict(self.logging),
        }
        del config_data['spotify']['client_id']
        del config_data['spotify']['client_secret']

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, 'w', encoding='utf-8') as f:
                yaml.safe_dump(config_data, f, default_flow_style=False, indent=2)
        except OSError as e:
            raise ConfigError(f"Failed to save config to {target}: {e}", details={'file_path': str(target)})

        return target

    def validate(self) -> List[str]:
        """
        Validate current configuration

        Returns:
            List of human-readable problems, empty when the configuration is usable
        """
        errors = []

        redirect = urlparse(self.spotify.redirect_url)
        if redirect.scheme != 'http' or not redirect.hostname or not redirect.port:
            errors.append(
                f"Redirect URL must be http://<host>:<port>/<path>, got: {self.spotify.redirect_url}"
            )

        if not 1 <= int(self.spotify.page_size) <= 100:
            errors.append(f"Invalid page_size (1-100): {self.spotify.page_size}")

        if not 1 <= int(self.spotify.playlists_page_size) <= 50:
            errors.append(f"Invalid playlists_page_size (1-50): {self.spotify.playlists_page_size}")

        if int(self.spotify.auth_timeout) <= 0:
            errors.append(f"auth_timeout must be positive: {self.spotify.auth_timeout}")

        return errors

    def __str__(self) -> str:
        sections = [
            f"Downloads: {self.storage.downloads_directory}",
            f"Cleaned: {self.storage.cleaned_directory}",
            f"Token: {self.storage.token_file}",
            f"Credentials: {'set' if self.has_credentials() else 'missing'}",
        ]
        return f"Settings({', '.join(sections)})"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings instance

    The instance is created on first access so that importing the package
    never touches the filesystem.

    Returns:
        The global Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Reload settings from configuration files

    Args:
        config_path: Optional path to specific config file

    Returns:
        New Settings instance with reloaded configuration
    """
    global _settings
    _settings = Settings(config_path)
    return _settings
