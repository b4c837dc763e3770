from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from mutagen import MutagenError
from mutagen.id3 import APIC, ID3, ID3NoHeaderError

from .config import TagSettings
from .errors import TagWriteError
from .models import CoverArt

logger = logging.getLogger(__name__)

_SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)


def sniff_mime(data: bytes, default: str = "image/png") -> str:
    for signature, mime in _SIGNATURES:
        if data.startswith(signature):
            return mime
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return default


class CoverArtWriter:
    """Writes and reads the embedded cover picture of MP3 files."""

    SUPPORTED_EXTS = {".mp3"}

    def __init__(self, settings: TagSettings | None = None) -> None:
        self.settings = settings or TagSettings()

    def make_art(self, data: bytes, mime: Optional[str] = None) -> CoverArt:
        return CoverArt(
            data=data,
            mime=mime or sniff_mime(data),
            picture_type=self.settings.picture_type,
            description=self.settings.description,
        )

    def write(self, path: Path, art: CoverArt) -> bool:
        if path.suffix.lower() not in self.SUPPORTED_EXTS:
            logger.debug("Skipping unsupported extension %s", path)
            return False
        try:
            try:
                tags = ID3(path)
            except ID3NoHeaderError:
                tags = ID3()
            kept = [frame for frame in tags.getall("APIC") if frame.type != art.picture_type]
            self._free_description(kept, art.description, path)
            frame = APIC(
                encoding=3,
                mime=art.mime,
                type=art.picture_type,
                desc=art.description,
                data=art.data,
            )
            tags.setall("APIC", kept + [frame])
            tags.save(path)
        except (MutagenError, OSError) as exc:
            raise TagWriteError(f"Error adding album art to '{path}': {exc}", path) from exc
        return True

    @staticmethod
    def _free_description(kept: list[APIC], description: str, path: Path) -> None:
        # APIC frames are keyed by description; a kept picture sharing ours would be overwritten
        taken = {frame.desc for frame in kept}
        for frame in kept:
            if frame.desc != description:
                continue
            candidate = f"{description} ({int(frame.type)})"
            counter = 2
            while candidate in taken:
                candidate = f"{description} ({int(frame.type)}-{counter})"
                counter += 1
            logger.warning(
                "Renaming picture type %d '%s' to '%s' in %s", int(frame.type), frame.desc, candidate, path
            )
            taken.add(candidate)
            frame.desc = candidate

    def read_cover(self, path: Path) -> Optional[CoverArt]:
        try:
            tags = ID3(path)
        except ID3NoHeaderError:
            return None
        except (MutagenError, OSError) as exc:  # pragma: no cover - depends on local files
            logger.debug("Failed to read tags for %s: %s", path, exc)
            return None
        for frame in tags.getall("APIC"):
            if frame.type == self.settings.picture_type:
                return CoverArt(
                    data=frame.data,
                    mime=frame.mime,
                    picture_type=int(frame.type),
                    description=frame.desc,
                )
        return None
