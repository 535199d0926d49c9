"""Genomic intervals and batching of nearby fetch requests."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, replace
from typing import overload


@dataclass(frozen=True, order=True)
class GenomicInterval:
    """A half-open range ``[start, end)`` on a named contig.

    Coordinates are 0-based. The contig is an opaque name resolved by the
    alignment store.
    """

    contig: str
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"Start position must be non-negative, got {self.start}")
        if self.end < self.start:
            raise ValueError(f"End position ({self.end}) must not be less than start ({self.start})")

    def __len__(self) -> int:
        return self.end - self.start

    def __str__(self) -> str:
        return f"{self.contig}:{self.start}-{self.end}"


def parse_region(region: str) -> GenomicInterval:
    """
    Parse a genomic region string into a GenomicInterval.

    Supports formats:
        - chr1:1000-2000
        - chr1:1,000-2,000
        - 1:1000-2000

    Raises:
        ValueError: If region format is invalid.
    """
    region = region.replace(",", "")
    try:
        contig, coords = region.rsplit(":", 1)
        start_str, end_str = coords.split("-")
        start = int(start_str)
        end = int(end_str)
    except (ValueError, AttributeError) as e:
        raise ValueError(
            f"Invalid region format: '{region}'. Expected format: 'chr1:1000-2000'"
        ) from e

    if not contig:
        raise ValueError(f"Invalid region format: '{region}'. Contig name is empty")
    if start < 0:
        raise ValueError(f"Start position must be non-negative, got {start}")
    if end <= start:
        raise ValueError(f"End position ({end}) must be greater than start ({start})")

    return GenomicInterval(contig, start, end)


class FetchBatch(Sequence[GenomicInterval]):
    """Intervals queued for a fetch pass, with nearby requests merged.

    Two intervals on the same contig are merged when they would overlap once
    each is expanded by ``window`` on both sides, i.e. when the gap between
    them is at most ``2 * window``. Entries are kept in push order and are
    not sorted.
    """

    def __init__(self, window: int):
        self.window = window
        self._fetches: list[GenomicInterval] = []

    def push(self, interval: GenomicInterval) -> None:
        if self._fetches:
            last = self._fetches[-1]
            if (
                last.contig == interval.contig
                and max(0, interval.start - self.window) <= last.end + self.window
                and max(0, last.start - self.window) <= interval.end + self.window
            ):
                # the merged entry covers both, whatever the push order
                self._fetches[-1] = replace(
                    last,
                    start=min(last.start, interval.start),
                    end=max(last.end, interval.end),
                )
                return

        self._fetches.append(interval)

    @overload
    def __getitem__(self, index: int) -> GenomicInterval: ...

    @overload
    def __getitem__(self, index: slice) -> list[GenomicInterval]: ...

    def __getitem__(self, index):
        return self._fetches[index]

    def __len__(self) -> int:
        return len(self._fetches)

    def __iter__(self) -> Iterator[GenomicInterval]:
        return iter(self._fetches)

    def __repr__(self) -> str:
        return f"FetchBatch(window={self.window}, fetches={self._fetches!r})"
