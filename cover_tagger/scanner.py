from __future__ import annotations

from pathlib import Path

from .config import TagSettings
from .errors import EmptyResultError, NotFoundError
from .fs_utils import has_suffix
from .models import DirectoryBatch


class AudioFolderScanner:
    """Lists the audio files sitting directly inside one album folder."""

    def __init__(self, settings: TagSettings | None = None) -> None:
        self.settings = settings or TagSettings()

    def list_audio_files(self, directory: Path) -> list[Path]:
        if not directory.exists() or not directory.is_dir():
            raise NotFoundError(f"Folder '{directory}' does not exist.", directory)
        files = [
            path
            for path in directory.iterdir()
            if path.is_file() and has_suffix(path, self.settings.extension)
        ]
        return sorted(files, key=lambda path: path.name)

    def collect_directory(self, directory: Path) -> DirectoryBatch:
        files = self.list_audio_files(directory)
        if not files:
            raise EmptyResultError(
                f"No {self.settings.extension.lstrip('.').upper()} files found in the folder '{directory}'",
                directory,
            )
        return DirectoryBatch(directory=directory, files=files)
