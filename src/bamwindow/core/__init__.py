"""Core windowed alignment access: intervals, buffer, subsampling, sample."""

from .buffer import RecordBuffer, RecordHandle, WindowSizes, is_valid_record
from .intervals import FetchBatch, GenomicInterval, parse_region
from .properties import AlignmentProperties, InsertSize, estimate_alignment_properties
from .sample import Sample, compute_window_sizes
from .serialization import serialize_alignment_properties, serialize_pileup
from .store import AlignmentStore, open_alignment_store
from .subsample import SubsampleCandidates

__all__ = [
    "AlignmentProperties",
    "AlignmentStore",
    "FetchBatch",
    "GenomicInterval",
    "InsertSize",
    "RecordBuffer",
    "RecordHandle",
    "Sample",
    "SubsampleCandidates",
    "WindowSizes",
    "compute_window_sizes",
    "estimate_alignment_properties",
    "is_valid_record",
    "open_alignment_store",
    "parse_region",
    "serialize_alignment_properties",
    "serialize_pileup",
]
