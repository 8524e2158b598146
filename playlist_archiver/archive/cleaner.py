"""
Derive the cleaned view of downloaded playlists

Each file in the downloads directory is a JSON array of raw playlist-track
objects. Cleaning projects every element onto a flat record and writes the
resulting array, under the same file name, to the cleaned directory. The
output is a pure function of the input, so cleaning twice is harmless.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config.settings import Settings, get_settings
from ..spotify.models import CleanedTrack
from ..utils.exceptions import StorageError
from ..utils.helpers import ensure_directory, read_json, write_json
from ..utils.logger import get_logger


class PlaylistCleaner:
    """
    Transforms raw playlist files into cleaned playlist files

    Attributes:
        downloads_dir: Directory holding the raw playlist files
        cleaned_dir: Directory receiving the cleaned playlist files
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.downloads_dir = self.settings.get_downloads_directory()
        self.cleaned_dir = self.settings.get_cleaned_directory()
        self.logger = get_logger(__name__)

    @staticmethod
    def clean_track(item: Dict[str, Any]) -> Dict[str, Any]:
        return CleanedTrack.from_raw(item).to_dict()

    def clean_items(self, items: Any, source: Path) -> List[Dict[str, Any]]:
        """
        Clean a parsed raw playlist

        Raises:
            StorageError: If the document is not an array of objects
        """
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            raise StorageError(
                f"{source} is not a playlist track array",
                details={'file_path': str(source)}
            )
        return [self.clean_track(item) for item in items]

    def clean_file(self, filename: str) -> Path:
        """
        Clean one downloaded playlist file

        Args:
            filename: File name inside the downloads directory

        Returns:
            Path of the cleaned file

        Raises:
            StorageError: If the source is missing, unparsable, or the output cannot be written
        """
        source = self.downloads_dir / filename
        items = read_json(source)
        if items is None:
            raise StorageError(f"Downloaded playlist not found: {source}", details={'file_path': str(source)})

        cleaned = self.clean_items(items, source)
        target = write_json(self.cleaned_dir / filename, cleaned)
        self.logger.debug(f"Cleaned {len(cleaned)} tracks: {source} -> {target}")
        return target

    def clean_all(self) -> int:
        """
        Clean every downloaded playlist

        Files are processed in name order. The first file that cannot be
        read or parsed stops the run; files already written stay written.

        Returns:
            Number of files cleaned

        Raises:
            StorageError: If the downloads directory is missing or a file fails
        """
        if not self.downloads_dir.is_dir():
            raise StorageError(
                f"Downloads directory not found: {self.downloads_dir}",
                details={'file_path': str(self.downloads_dir)}
            )

        ensure_directory(self.cleaned_dir)
        filenames = sorted(
            path.name for path in self.downloads_dir.iterdir()
            if path.is_file() and path.name.endswith('.json')
        )

        for filename in filenames:
            self.clean_file(filename)
            self.logger.console_info(f"Cleaned: {filename}")

        self.logger.info(f"Cleaned {len(filenames)} playlists into {self.cleaned_dir}")
        return len(filenames)
