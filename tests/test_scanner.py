import tempfile
import unittest
from pathlib import Path

from cover_tagger.config import TagSettings
from cover_tagger.errors import EmptyResultError, NotFoundError
from cover_tagger.scanner import AudioFolderScanner


class TestAudioFolderScanner(unittest.TestCase):
    def test_lists_only_mp3_files_sorted(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            for name in ("b.mp3", "a.MP3", "notes.txt", "c.flac"):
                (tmp / name).write_bytes(b"x")
            (tmp / "sub.mp3").mkdir()

            files = AudioFolderScanner().list_audio_files(tmp)

            self.assertEqual([p.name for p in files], ["a.MP3", "b.mp3"])

    def test_does_not_descend_into_subfolders(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            (tmp / "disc2").mkdir()
            (tmp / "disc2" / "01.mp3").write_bytes(b"x")
            self.assertEqual(AudioFolderScanner().list_audio_files(tmp), [])

    def test_missing_folder_raises_not_found(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            missing = Path(tmpdir) / "nope"
            with self.assertRaises(NotFoundError) as ctx:
                AudioFolderScanner().list_audio_files(missing)
            self.assertEqual(ctx.exception.path, missing)

    def test_collect_directory_reports_empty_folder(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            (tmp / "notes.txt").write_text("liner notes", encoding="utf-8")
            with self.assertRaises(EmptyResultError) as ctx:
                AudioFolderScanner().collect_directory(tmp)
            self.assertIn("No MP3 files found", str(ctx.exception))

    def test_configured_extension(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            (tmp / "a.mp3").write_bytes(b"x")
            (tmp / "b.MP2").write_bytes(b"x")
            scanner = AudioFolderScanner(TagSettings(extension="mp2"))
            batch = scanner.collect_directory(tmp)
            self.assertEqual(batch.directory, tmp)
            self.assertEqual([p.name for p in batch.files], ["b.MP2"])


if __name__ == "__main__":
    unittest.main()
