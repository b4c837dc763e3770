"Embed cover art into MP3 tags, one folder or a whole manifest at a time."

from importlib import metadata

from .config import RunConfig, RunMode, Settings
from .pipeline import CoverTagger
from .tagging import CoverArtWriter

__all__ = ["CoverArtWriter", "CoverTagger", "RunConfig", "RunMode", "Settings", "__version__"]

DISTRIBUTION = "cover-tagger"


def __getattr__(name: str) -> str:
    if name != "__version__":
        raise AttributeError(name)
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:  # pragma: no cover - source checkout without install
        return "0.0.0"
