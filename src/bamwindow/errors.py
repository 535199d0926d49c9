"""Exception types raised by bamwindow."""

from __future__ import annotations


class StoreIOError(OSError):
    """Opening, fetching from, or reading an alignment store failed.

    Never retried internally; the caller decides whether to skip the locus
    or abort the run.
    """


class StatisticsEstimationError(ValueError):
    """Alignment statistics could not be estimated from the sampled records."""


class StaleRecordError(RuntimeError):
    """A record handle was used after its buffer loaded a newer window."""
