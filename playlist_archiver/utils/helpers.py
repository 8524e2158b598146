"""
Utility functions and helpers for Playlist-Archiver
Common functions for JSON persistence, file naming, and display formatting
"""

import json
import re
import unicodedata
from pathlib import Path
from typing import Any, Optional, Union

from .exceptions import StorageError


def read_json(path: Union[str, Path], default: Any = None) -> Any:
    """
    Read a JSON document from disk

    A missing file is treated as "no data" and returns ``default``. Any
    other failure (unreadable file, invalid JSON) is an error.

    Args:
        path: File to read
        default: Value returned when the file does not exist

    Returns:
        Parsed JSON value or ``default``

    Raises:
        StorageError: If the file exists but cannot be read or parsed
    """
    file_path = Path(path)
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError:
        return default
    except json.JSONDecodeError as e:
        raise StorageError(
            f"Invalid JSON in {file_path}: {e}",
            details={'file_path': str(file_path), 'original_error': str(e)}
        )
    except OSError as e:
        raise StorageError(
            f"Failed to read {file_path}: {e}",
            details={'file_path': str(file_path), 'original_error': str(e)}
        )


def write_json(path: Union[str, Path], data: Any, mode: Optional[int] = None) -> Path:
    """
    Write a value to disk as pretty-printed JSON

    Args:
        path: Destination file, parent directories are created
        data: JSON-serialisable value
        mode: Optional permission bits applied after writing (e.g. 0o600)

    Returns:
        Path of the written file

    Raises:
        StorageError: If the file cannot be written
    """
    file_path = Path(path)
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write('\n')
    except (OSError, TypeError, ValueError) as e:
        raise StorageError(
            f"Failed to write {file_path}: {e}",
            details={'file_path': str(file_path), 'original_error': str(e)}
        )

    if mode is not None:
        try:
            file_path.chmod(mode)
        except OSError:
            # chmod is a no-op on some filesystems (Windows, FAT mounts)
            pass

    return file_path


def sanitize_filename(filename: str, max_length: int = 200) -> str:
    """
    Sanitize filename for cross-platform compatibility

    Args:
        filename: Original filename (usually a playlist name)
        max_length: Maximum filename length

    Returns:
        Sanitized filename, "unknown" if nothing usable remains
    """
    if not filename:
        return "unknown"

    filename = unicodedata.normalize('NFKC', filename.strip())

    # Characters not allowed in Windows filenames plus control characters
    invalid_chars = r'[<>:"/\\|?*\x00-\x1f\x7f-\x9f]'
    filename = re.sub(invalid_chars, '', filename)

    # Replace multiple whitespace characters with single space
    filename = re.sub(r'\s+', ' ', filename)

    # Leading dots would hide the file, trailing dots/spaces break Windows
    filename = filename.strip(' .')

    reserved_names = {
        'CON', 'PRN', 'AUX', 'NUL',
        'COM1', 'COM2', 'COM3', 'COM4', 'COM5', 'COM6', 'COM7', 'COM8', 'COM9',
        'LPT1', 'LPT2', 'LPT3', 'LPT4', 'LPT5', 'LPT6', 'LPT7', 'LPT8', 'LPT9'
    }
    if filename.split('.')[0].upper() in reserved_names:
        filename = f"_{filename}"

    if len(filename) > max_length:
        filename = filename[:max_length].rstrip(' .')

    return filename or "unknown"


def playlist_filename(playlist_name: str) -> str:
    """Map a playlist name onto the JSON file name used in the archive directories"""
    return f"{sanitize_filename(playlist_name)}.json"


def normalize_playlist_name(name: str) -> str:
    """
    Normalize playlist name for case-insensitive matching

    Args:
        name: Playlist name as typed by the user or returned by Spotify

    Returns:
        Case-folded name with collapsed whitespace
    """
    if not name:
        return ""
    return re.sub(r'\s+', ' ', name).strip().casefold()


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure directory exists, create if necessary

    Args:
        path: Directory path

    Returns:
        Path object

    Raises:
        StorageError: If the directory cannot be created
    """
    path_obj = Path(path)
    try:
        path_obj.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageError(
            f"Failed to create directory {path_obj}: {e}",
            details={'file_path': str(path_obj), 'original_error': str(e)}
        )
    return path_obj


def format_duration(seconds: Union[int, float]) -> str:
    """
    Format duration in seconds to human-readable string

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string
    """
    if seconds < 0:
        return "0:00"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    else:
        return f"{minutes}:{secs:02d}"
