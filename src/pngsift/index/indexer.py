"""Concurrent metadata indexing pipeline."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from pathlib import Path
from typing import Callable, Dict, List, Sequence, Tuple

from pngsift.config import AppConfig
from pngsift.index.builder import SharedIndex
from pngsift.index.scheduler import WorkerPool
from pngsift.ingestion.png_chunks import read_png_metadata
from pngsift.models import IndexStats, ParseJob
from pngsift.utils.files import discover_jobs

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[ParseJob], None]


class Indexer:
    """Coordinates discovery, parallel parsing and the shared index."""

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.progress = progress

    def discover(self, folder: Path) -> List[ParseJob]:
        return discover_jobs(folder, self.config.extension)

    def build(self, folder: Path) -> Tuple[Dict[str, str], IndexStats]:
        """Index every image directly inside ``folder``."""
        return self.index_jobs(self.discover(folder))

    def index_jobs(self, jobs: Sequence[ParseJob]) -> Tuple[Dict[str, str], IndexStats]:
        stats = IndexStats(discovered=len(jobs))
        shared = SharedIndex()
        if not jobs:
            LOGGER.warning("No %s files found", self.config.extension)
            return {}, stats

        workers = min(self.config.resolve_workers(), len(jobs))
        LOGGER.info("Extracting metadata from %d files with %d workers", len(jobs), workers)

        handles: List[Tuple[ParseJob, Future]] = []
        with WorkerPool(workers) as pool:
            for job in jobs:
                handles.append((job, pool.submit(self._process, job, shared)))
            pool.wait_all(future for _, future in handles)

        for job, future in handles:
            if future.exception() is not None:
                if job.identity not in shared:
                    shared.merge(job.identity, "")
                stats.record_failure(job.identity)
            else:
                stats.record(job.identity, future.result())

        return shared.snapshot(), stats

    def _process(self, job: ParseJob, shared: SharedIndex) -> str:
        """Parse one file, then publish its metadata."""
        LOGGER.debug("Processing: %s", job.path)
        metadata = read_png_metadata(job.path, max_record_size=self.config.max_text_record)
        shared.merge(job.identity, metadata)
        if self.progress is not None:
            self.progress(job)
        return metadata
