"""Utility helpers for working with image folders."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List

from pngsift.config import DEFAULT_EXTENSION
from pngsift.models import ParseJob


def directory_exists(path: str | Path) -> bool:
    """Return True if ``path`` names an existing directory."""
    return bool(str(path)) and Path(path).is_dir()


def derive_identity(name: str, extension: str = DEFAULT_EXTENSION) -> str:
    """Strip ``extension`` from a file name to get its index key."""
    if extension and name.endswith(extension):
        return name[: -len(extension)]
    return name


def iter_image_paths(folder: Path, extension: str = DEFAULT_EXTENSION) -> Iterator[Path]:
    """Yield image files directly inside ``folder``, sorted by name.

    Only regular files whose name ends with ``extension`` and has something
    in front of it are yielded; subdirectories are not descended into.
    """
    for child in sorted(Path(folder).iterdir()):
        name = child.name
        if len(name) > len(extension) and name.endswith(extension) and child.is_file():
            yield child


def discover_jobs(folder: Path, extension: str = DEFAULT_EXTENSION) -> List[ParseJob]:
    """Build one parse job per image in ``folder``."""
    return [
        ParseJob(path=path, identity=derive_identity(path.name, extension))
        for path in iter_image_paths(folder, extension)
    ]


def count_image_files(folder: Path, extension: str = DEFAULT_EXTENSION) -> int:
    return sum(1 for _ in iter_image_paths(folder, extension))
