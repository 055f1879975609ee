"""Move filtered images into the output folder."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable

from pngsift.config import DEFAULT_EXTENSION, DEFAULT_OUTPUT_SUBFOLDER
from pngsift.models import RelocationReport

LOGGER = logging.getLogger(__name__)


def prepare_output_dir(destination: Path) -> Path:
    """Delete ``destination`` if present and create it empty."""
    if destination.is_dir():
        shutil.rmtree(destination)
    elif destination.exists():
        destination.unlink()
    destination.mkdir(parents=True)
    return destination


def relocate_images(
    identities: Iterable[str],
    folder: Path,
    *,
    extension: str = DEFAULT_EXTENSION,
    subfolder: str = DEFAULT_OUTPUT_SUBFOLDER,
) -> RelocationReport:
    """Move ``<identity><extension>`` for each identity into ``folder/subfolder``.

    A failed move is logged and recorded; the remaining files are still moved.
    """
    folder = Path(folder)
    destination = prepare_output_dir(folder / subfolder)
    report = RelocationReport(destination=destination)

    for identity in identities:
        name = f"{identity}{extension}"
        try:
            shutil.move(str(folder / name), str(destination / name))
        except OSError as exc:
            LOGGER.error("Failed to move file %s: %s", name, exc)
            report.failed.append((identity, str(exc)))
        else:
            report.moved.append(identity)

    LOGGER.info("Moved %d files to %s", len(report.moved), destination)
    return report
