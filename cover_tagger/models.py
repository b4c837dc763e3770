from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .errors import CoverTaggerError

FRONT_COVER = 3


@dataclass(frozen=True, slots=True)
class CoverArt:
    data: bytes
    mime: str = "image/png"
    picture_type: int = FRONT_COVER
    description: str = "Cover"


@dataclass
class DirectoryBatch:
    directory: Path
    files: list[Path]


@dataclass(frozen=True, slots=True)
class ManifestRow:
    line: int
    fields: Dict[str, Optional[str]]
    album_column: str = "Album"
    art_column: str = "Art"

    @property
    def album(self) -> Optional[str]:
        return self._value(self.album_column)

    @property
    def art(self) -> Optional[str]:
        return self._value(self.art_column)

    def _value(self, column: str) -> Optional[str]:
        value = self.fields.get(column)
        if value is None:
            return None
        value = value.strip()
        return value or None


@dataclass(slots=True)
class RunSummary:
    attempted: List[Path] = field(default_factory=list)
    tagged: List[Path] = field(default_factory=list)
    failed: List[Path] = field(default_factory=list)
    errors: List[CoverTaggerError] = field(default_factory=list)
    rows_total: int = 0
    rows_skipped: int = 0

    def record_error(self, error: CoverTaggerError) -> None:
        self.errors.append(error)

    def render(self) -> str:
        line = f"{len(self.tagged)} tagged, {len(self.failed)} failed"
        if self.rows_total:
            line += f" ({self.rows_total} manifest rows, {self.rows_skipped} skipped)"
        return line
