from __future__ import annotations

import csv
import logging
from collections.abc import Iterator
from pathlib import Path

from .config import ManifestSettings
from .errors import ManifestFormatError, NotFoundError
from .models import ManifestRow

logger = logging.getLogger(__name__)


class ManifestReader:
    """Streams album/art rows from a CSV manifest with a header line.

    Every call to :meth:`iter_rows` starts a fresh pass over the file. Rows
    are handed out as read; checking that the paths make sense is left to
    the caller.
    """

    def __init__(self, path: Path, settings: ManifestSettings | None = None) -> None:
        self.path = path
        self.settings = settings or ManifestSettings()

    def iter_rows(self) -> Iterator[ManifestRow]:
        if not self.path.is_file():
            raise NotFoundError(f"Manifest '{self.path}' does not exist.", self.path)
        reader: csv.DictReader | None = None
        try:
            with self.path.open("r", encoding=self.settings.encoding, newline="") as fh:
                reader = csv.DictReader(fh, delimiter=self.settings.delimiter)
                header = [name.strip() for name in reader.fieldnames or []]
                reader.fieldnames = header
                for column in (self.settings.album_column, self.settings.art_column):
                    if column not in header:
                        logger.warning("Manifest %s has no '%s' column", self.path, column)
                for fields in reader:
                    yield ManifestRow(
                        line=reader.line_num,
                        fields={key: value for key, value in fields.items() if key is not None},
                        album_column=self.settings.album_column,
                        art_column=self.settings.art_column,
                    )
        except (UnicodeDecodeError, csv.Error) as exc:
            line = reader.line_num if reader is not None else 0
            raise ManifestFormatError(
                f"Manifest '{self.path}' is unreadable after line {line}: {exc}", self.path
            ) from exc
