"""Core PngSift data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple


@dataclass(slots=True, frozen=True)
class TextRecord:
    """Keyword/text pair decoded from a single tEXt chunk."""

    keyword: str
    text: str

    def render(self) -> str:
        return f"{self.keyword}: {self.text}\n"


@dataclass(slots=True, frozen=True)
class ParseJob:
    """One image file scheduled for metadata extraction."""

    path: Path
    identity: str


@dataclass(slots=True)
class IndexStats:
    discovered: int = 0
    with_metadata: int = 0
    empty: int = 0
    failed: int = 0
    processed: List[str] = field(default_factory=list)

    def record(self, identity: str, metadata: str) -> None:
        if metadata:
            self.with_metadata += 1
        else:
            self.empty += 1
        self.processed.append(identity)

    def record_failure(self, identity: str) -> None:
        self.failed += 1
        self.processed.append(identity)


@dataclass(slots=True)
class RelocationReport:
    """Outcome of moving filtered images into the output folder."""

    destination: Path
    moved: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)
