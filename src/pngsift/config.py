"""Application configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_EXTENSION = ".png"
DEFAULT_OUTPUT_SUBFOLDER = "Filtered_Search"
# Largest tEXt payload copied into the parser buffer; bigger records are skipped.
MAX_TEXT_RECORD = 64 * 1024


def _get_default_workers() -> int:
    """Size the worker pool to the available hardware parallelism."""
    return os.cpu_count() or 1


@dataclass(slots=True)
class AppConfig:
    extension: str = DEFAULT_EXTENSION
    output_subfolder: str = DEFAULT_OUTPUT_SUBFOLDER
    workers: int | None = None
    max_text_record: int = MAX_TEXT_RECORD

    def resolve_workers(self) -> int:
        if self.workers is None:
            return _get_default_workers()
        return max(int(self.workers), 1)

    def resolve_output_dir(self, folder: Path) -> Path:
        return Path(folder) / self.output_subfolder
