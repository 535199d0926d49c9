"""Windowed, filtered in-memory view over alignment records."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import pysam

from ..config import SampleConfig
from ..errors import StaleRecordError, StoreIOError
from .intervals import FetchBatch, GenomicInterval
from .store import AlignmentStore
from .subsample import SubsampleCandidates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindowSizes:
    """Margins (bp) added around a locus before fetching."""

    single_read_window: int
    read_pair_window: int

    def __post_init__(self) -> None:
        if self.single_read_window < 0 or self.read_pair_window < 0:
            raise ValueError(f"Window sizes must be non-negative, got {self}")


def is_valid_record(record: pysam.AlignedSegment) -> bool:
    """Whether a record may count as evidence at all."""
    return not (
        record.is_secondary or record.is_duplicate or record.is_unmapped or record.is_qcfail
    )


class RecordHandle:
    """Read-only view of a record in a buffer's current window.

    Attribute access is forwarded to the wrapped record. A handle is only
    valid until the buffer fetches again; after that every access raises
    ``StaleRecordError``. Never mutate the wrapped record.
    """

    __slots__ = ("_record", "_buffer", "_generation")

    def __init__(self, record: pysam.AlignedSegment, buffer: RecordBuffer, generation: int):
        self._record = record
        self._buffer = buffer
        self._generation = generation

    @property
    def is_current(self) -> bool:
        return self._generation == self._buffer.generation

    @property
    def record(self) -> pysam.AlignedSegment:
        if not self.is_current:
            raise StaleRecordError(
                f"Record handle from window {self._generation} used after the buffer "
                f"moved to window {self._buffer.generation}"
            )
        return self._record

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self.record, name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in RecordHandle.__slots__:
            object.__setattr__(self, name, value)
        else:
            raise AttributeError(f"RecordHandle is read-only, cannot set '{name}'")

    def __repr__(self) -> str:
        state = "current" if self.is_current else "stale"
        return f"RecordHandle({self._record.query_name!r}, {state})"


class RecordBuffer:
    """Holds the records of the most recently fetched window.

    Each ``fetch`` replaces the loaded window and invalidates every handle
    produced from the previous one. Single-threaded: do not fetch while
    another caller iterates.
    """

    def __init__(
        self,
        store: AlignmentStore,
        windows: WindowSizes,
        config: SampleConfig | None = None,
    ):
        self.store = store
        self.windows = windows
        self.config = config or SampleConfig()
        self.generation = 0
        self._records: list[pysam.AlignedSegment] = []

    @property
    def single_read_window(self) -> int:
        return self.windows.single_read_window

    @property
    def read_pair_window(self) -> int:
        return self.windows.read_pair_window

    def window(self, read_pair_mode: bool) -> int:
        if read_pair_mode:
            return self.windows.read_pair_window
        return self.windows.single_read_window

    def fetch(self, interval: GenomicInterval, read_pair_mode: bool) -> None:
        """Load all records overlapping ``interval`` expanded by the window.

        Raises:
            StoreIOError: If the contig is unknown to the store or reading fails.
        """
        window = self.window(read_pair_mode)
        start = max(0, interval.start - window)
        end = interval.end + window

        # Drop the old window first so a failed fetch never leaves stale records.
        self.generation += 1
        self._records = []

        logger.debug("Fetching %s:%d-%d (window %d)", interval.contig, start, end, window)
        try:
            records = list(self.store.fetch(interval.contig, start, end))
        except (OSError, ValueError) as e:
            raise StoreIOError(
                f"Failed to fetch {interval.contig}:{start}-{end} from alignment store: {e}"
            ) from e

        self._records = records
        logger.debug("Loaded %d records for %s:%d-%d", len(records), interval.contig, start, end)

    def build_fetches(self, read_pair_mode: bool) -> FetchBatch:
        return FetchBatch(self.window(read_pair_mode))

    def subsample(self, max_depth: int, depth: int) -> SubsampleCandidates:
        """Create a subsampler seeded with this sample's configured seed."""
        return SubsampleCandidates(max_depth, depth, seed=self.config.subsample_seed)

    def iter_records(self) -> Iterator[RecordHandle]:
        """Yield handles to valid records of the current window, in store order."""
        generation = self.generation
        for record in self._records:
            if self.generation != generation:
                raise StaleRecordError("Buffer fetched a new window during iteration")
            if is_valid_record(record):
                yield RecordHandle(record, self, generation)

    def __iter__(self) -> Iterator[RecordHandle]:
        return self.iter_records()

    def __repr__(self) -> str:
        return (
            f"RecordBuffer(single_read_window={self.single_read_window}, "
            f"read_pair_window={self.read_pair_window}, loaded={len(self._records)})"
        )
