from __future__ import annotations

import errno
import os
from pathlib import Path
from typing import Optional


def path_exists(path: Path) -> Optional[bool]:
    """Existence check used before any folder or artwork is touched.

    Names the OS refuses outright (embedded NUL) count as missing. Names that
    are merely too long are looked up in their parent directory; ``None``
    means the parent itself is gone.
    """
    try:
        path.stat()
        return True
    except FileNotFoundError:
        return False
    except ValueError:
        return False
    except OSError as exc:
        if exc.errno != errno.ENAMETOOLONG:
            raise
        return _listed_in_parent(path)


def _listed_in_parent(path: Path) -> Optional[bool]:
    try:
        with os.scandir(path.parent) as it:
            return any(entry.name == path.name for entry in it)
    except FileNotFoundError:
        return None


def has_suffix(path: Path, extension: str) -> bool:
    return path.suffix.lower() == extension.lower()
