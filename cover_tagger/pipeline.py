from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

from .config import RunConfig, RunMode
from .errors import (
    ArgumentError,
    CoverTaggerError,
    ImageProcessingError,
    InvalidRowError,
    ManifestFormatError,
    NotFoundError,
    TagWriteError,
)
from .fs_utils import path_exists
from .imaging import ImageNormalizer
from .manifest import ManifestReader
from .models import ManifestRow, RunSummary
from .scanner import AudioFolderScanner
from .tagging import CoverArtWriter

logger = logging.getLogger(__name__)


class CoverTagger:
    """Drives one run: folders are enumerated and every MP3 is tagged in turn.

    Blocking work for a file (reading the artwork, normalizing it and
    rewriting the tag) runs in the loop's default executor, but it is always
    awaited before the next file or manifest row is started, so at most one
    file is being worked on at any time and output follows enumeration order.
    """

    def __init__(
        self,
        config: RunConfig,
        *,
        scanner: Optional[AudioFolderScanner] = None,
        writer: Optional[CoverArtWriter] = None,
        normalizer: Optional[ImageNormalizer] = None,
    ) -> None:
        self.config = config
        settings = config.settings
        self.scanner = scanner or AudioFolderScanner(settings.tags)
        self.writer = writer or CoverArtWriter(settings.tags)
        self.normalizer: Optional[ImageNormalizer] = None
        if config.normalize:
            self.normalizer = normalizer or ImageNormalizer(
                settings.image.size, settings.image.search_steps
            )

    async def run(self) -> RunSummary:
        config = self.config
        if config.mode is RunMode.MANIFEST:
            if config.manifest is None:
                raise ArgumentError("manifest mode requires a manifest path")
            return await self.run_manifest(config.manifest)
        if config.folder is None or config.image is None:
            raise ArgumentError(f"{config.mode.value} mode requires an MP3 folder and an art image")
        return await self.run_folder(config.folder, config.image)

    async def run_folder(self, folder: Path, image: Path) -> RunSummary:
        summary = RunSummary()
        await self._tag_album(folder, image, summary, report_all=True)
        self._finish(summary)
        return summary

    async def run_manifest(self, manifest: Path) -> RunSummary:
        summary = RunSummary()
        reader = ManifestReader(manifest, self.config.settings.manifest)
        try:
            for row in reader.iter_rows():
                summary.rows_total += 1
                if not await self._process_row(row, manifest, summary):
                    summary.rows_skipped += 1
        except (NotFoundError, ManifestFormatError) as exc:
            self._report(exc, summary)
        self._finish(summary)
        return summary

    async def _process_row(self, row: ManifestRow, manifest: Path, summary: RunSummary) -> bool:
        settings = self.config.settings.manifest
        album, art = row.album, row.art
        if album is None or art is None:
            missing = [
                column
                for column, value in ((settings.album_column, album), (settings.art_column, art))
                if value is None
            ]
            columns = ", ".join(f"'{column}'" for column in missing)
            self._report(
                InvalidRowError(f"Row {row.line} of '{manifest}' has no {columns} value.", manifest),
                summary,
            )
            return False
        try:
            folder = Path(album).expanduser().resolve()
            image = Path(art).expanduser().resolve()
        except (ValueError, OSError) as exc:
            self._report(
                InvalidRowError(f"Row {row.line} of '{manifest}' has an unusable path: {exc}", manifest),
                summary,
            )
            return False
        logger.info("Processing album '%s'", folder)
        return await self._tag_album(folder, image, summary, report_all=False)

    async def _tag_album(self, folder: Path, image: Path, summary: RunSummary, *, report_all: bool) -> bool:
        problems = self._check_inputs(folder, image)
        if problems:
            for problem in problems if report_all else problems[:1]:
                self._report(problem, summary)
            return False
        try:
            batch = self.scanner.collect_directory(folder)
        except CoverTaggerError as exc:
            self._report(exc, summary)
            return False
        logger.debug("Tagging %d files in %s", len(batch.files), batch.directory)
        for path in batch.files:
            await self._tag_file(path, image, summary)
        return True

    def _check_inputs(self, folder: Path, image: Path) -> list[CoverTaggerError]:
        problems: list[CoverTaggerError] = []
        if not path_exists(folder):
            problems.append(NotFoundError(f"Error: Folder '{folder}' does not exist.", folder))
        if not path_exists(image):
            problems.append(NotFoundError(f"Error: Art image '{image}' does not exist.", image))
        return problems

    async def _tag_file(self, path: Path, image: Path, summary: RunSummary) -> None:
        summary.attempted.append(path)
        loop = asyncio.get_running_loop()
        try:
            written = await loop.run_in_executor(None, self._write_cover, path, image)
        except (ImageProcessingError, TagWriteError) as exc:
            summary.failed.append(path)
            self._report(exc, summary)
            return
        if not written:
            summary.failed.append(path)
            self._report(TagWriteError(f"Error adding album art to '{path}'", path), summary)
            return
        summary.tagged.append(path)
        logger.info("Successfully added album art to '%s'", path.name)

    def _write_cover(self, path: Path, image: Path) -> bool:
        try:
            data = image.read_bytes()
        except OSError as exc:
            raise ImageProcessingError(f"Could not read art image '{image}': {exc}", image) from exc
        if self.normalizer is not None:
            try:
                data = self.normalizer.normalize(data)
            except ImageProcessingError as exc:
                raise ImageProcessingError(f"Error resizing '{image}' for '{path}': {exc}", path) from exc
            art = self.writer.make_art(data, self.normalizer.mime)
        else:
            art = self.writer.make_art(data)
        return self.writer.write(path, art)

    def _report(self, error: CoverTaggerError, summary: RunSummary) -> None:
        summary.record_error(error)
        logger.error("%s", error)

    def _finish(self, summary: RunSummary) -> None:
        logger.info("Processing completed: %s", summary.render())
