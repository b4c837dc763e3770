import tempfile
import unittest
from pathlib import Path

from pydantic import ValidationError

from cover_tagger.config import RunConfig, RunMode, Settings, TagSettings, load_settings
from cover_tagger.errors import ArgumentError


class TestRunConfig(unittest.TestCase):
    def test_folder_mode_requires_both_paths(self) -> None:
        with self.assertRaises(ArgumentError):
            RunConfig.build(mode=RunMode.FOLDER, folder="/music/album")
        with self.assertRaises(ArgumentError):
            RunConfig.build(mode=RunMode.NORMALIZE, image="/art/cover.png")

    def test_manifest_mode_requires_manifest(self) -> None:
        with self.assertRaises(ArgumentError):
            RunConfig.build(mode=RunMode.MANIFEST, folder="/music/album", image="/art/cover.png")

    def test_paths_are_resolved_without_touching_disk(self) -> None:
        config = RunConfig.build(mode=RunMode.FOLDER, folder="/missing/../music", image="/art/cover.png")
        self.assertEqual(config.folder, Path("/music"))
        self.assertEqual(config.image, Path("/art/cover.png"))
        self.assertFalse(config.normalize)

    def test_blank_paths_count_as_missing(self) -> None:
        with self.assertRaises(ArgumentError):
            RunConfig.build(mode=RunMode.FOLDER, folder="", image="/art/cover.png")

    def test_normalize_flag_follows_mode(self) -> None:
        self.assertTrue(RunConfig.build(mode="normalize", folder="/a", image="/b").normalize)
        self.assertTrue(RunConfig.build(mode="manifest", manifest="/m.csv").normalize)

    def test_config_is_frozen(self) -> None:
        config = RunConfig.build(mode=RunMode.MANIFEST, manifest="/m.csv")
        with self.assertRaises(ValidationError):
            config.manifest = Path("/other.csv")  # type: ignore[misc]


class TestSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = Settings()
        self.assertEqual(settings.tags.extension, ".mp3")
        self.assertEqual(settings.tags.description, "Cover")
        self.assertEqual(settings.tags.picture_type, 3)
        self.assertEqual(settings.image.size, 300)
        self.assertEqual(settings.manifest.album_column, "Album")
        self.assertEqual(settings.manifest.art_column, "Art")

    def test_extension_is_normalised(self) -> None:
        self.assertEqual(TagSettings(extension="MP3").extension, ".mp3")

    def test_load_yaml(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "settings.yaml"
            path.write_text("image:\n  size: 500\nmanifest:\n  delimiter: ';'\n", encoding="utf-8")
            settings = load_settings(path)
        self.assertEqual(settings.image.size, 500)
        self.assertEqual(settings.manifest.delimiter, ";")
        self.assertEqual(settings.tags.description, "Cover")

    def test_empty_yaml_gives_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "settings.yaml"
            path.write_text("", encoding="utf-8")
            self.assertEqual(load_settings(path), Settings())

    def test_no_path_means_defaults(self) -> None:
        self.assertEqual(load_settings(None), Settings())

    def test_bad_config_raises_argument_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "settings.yaml"
            path.write_text("image:\n  size: -1\n", encoding="utf-8")
            with self.assertRaises(ArgumentError):
                load_settings(path)
            with self.assertRaises(ArgumentError):
                load_settings(Path(tmpdir) / "missing.yaml")


if __name__ == "__main__":
    unittest.main()
