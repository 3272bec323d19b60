"""
Data models shared by resolvers, the audio downloader and the command session

Every object here is transient: created while a command runs and dropped
when it finishes. Nothing is persisted or serialized.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Dict, Optional, Tuple


@dataclass(frozen=True)
class TrackReference:
    """
    Locator for a playable audio item

    Attributes:
        locator: YouTube watch URL or video ID
        title: Title when the resolver already knows it
    """
    locator: str
    title: Optional[str] = None

    def __str__(self) -> str:
        return self.title or self.locator


@dataclass(frozen=True)
class Playlist:
    """
    Ordered, immutable collection of track references under a shared title

    The tracks tuple is built completely before iteration starts.
    """
    title: str
    tracks: Tuple[TrackReference, ...] = ()

    def __len__(self) -> int:
        return len(self.tracks)

    def __iter__(self):
        return iter(self.tracks)


@dataclass
class DownloadJob:
    """
    State of a single in-progress transfer

    Created when a fetch begins and updated by the progress hook as chunks
    arrive. Discarded once the transfer completes or fails.
    """
    locator: str
    destination: Path
    expected_size: Optional[int] = None
    bytes_received: int = 0

    @property
    def progress_percent(self) -> float:
        """Completion percentage, 0 when the expected size is unknown"""
        if not self.expected_size:
            return 0.0
        return min(100.0, (self.bytes_received / self.expected_size) * 100)


class TrackStatus(Enum):
    """
    Final state of one track pipeline

    Values:
        DOWNLOADED: File written to the output directory
        SKIPPED: A matching file already exists locally
        NOT_FOUND: Search returned no results
        FAILED: Resolution, transfer or filesystem error
    """
    DOWNLOADED = "downloaded"
    SKIPPED = "skipped"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class TrackOutcome:
    """
    Typed result of resolving and fetching one track

    Attributes:
        source: Query or locator the pipeline started from
        status: Final TrackStatus
        file_path: Written (or already present) file, when known
        reason: Error description for FAILED and NOT_FOUND outcomes
    """
    source: str
    status: TrackStatus
    file_path: Optional[Path] = None
    reason: Optional[str] = None

    @classmethod
    def downloaded(cls, source: str, file_path: Path) -> 'TrackOutcome':
        return cls(source, TrackStatus.DOWNLOADED, file_path=file_path)

    @classmethod
    def skipped(cls, source: str, file_path: Optional[Path] = None) -> 'TrackOutcome':
        return cls(source, TrackStatus.SKIPPED, file_path=file_path)

    @classmethod
    def not_found(cls, source: str) -> 'TrackOutcome':
        return cls(source, TrackStatus.NOT_FOUND, reason="no results")

    @classmethod
    def failed(cls, source: str, reason: str) -> 'TrackOutcome':
        return cls(source, TrackStatus.FAILED, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status in (TrackStatus.DOWNLOADED, TrackStatus.SKIPPED)


def summarize_outcomes(outcomes: Iterable[TrackOutcome]) -> Dict[TrackStatus, int]:
    """Count outcomes per status, every status present in the result"""
    counts = {status: 0 for status in TrackStatus}
    for outcome in outcomes:
        counts[outcome.status] += 1
    return counts
