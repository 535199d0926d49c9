"""A sequenced sample: windowed, filtered, depth-aware access to its alignments."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from ..config import ProtocolStrandedness, SampleConfig, VariantKind
from .buffer import RecordBuffer, WindowSizes
from .properties import AlignmentProperties, estimate_alignment_properties
from .store import AlignmentStore, open_alignment_store

if TYPE_CHECKING:
    from ..evidence.observation import Observable, Pileup

logger = logging.getLogger(__name__)


def compute_window_sizes(
    alignment_properties: AlignmentProperties, sd_margin: float
) -> WindowSizes:
    """Derive fetch windows from alignment statistics.

    ``read_pair_window = mean + sd_margin * sd`` rounded half up, and
    ``single_read_window = max_read_len``. Without insert size statistics the
    read-pair window falls back to the single-read window.
    """
    single_read_window = int(alignment_properties.max_read_len)
    insert_size = alignment_properties.insert_size
    if insert_size is None:
        read_pair_window = single_read_window
    else:
        read_pair_window = math.floor(insert_size.mean + sd_margin * insert_size.sd + 0.5)
    return WindowSizes(single_read_window=single_read_window, read_pair_window=read_pair_window)


class Sample:
    """A sequenced sample, e.g. a tumor or a normal sample.

    Owns the record buffer over the sample's alignment store. Variant-specific
    logic lives in the variants' ``extract_observations``; the sample only
    supplies windowed, filtered access and the depth limit.
    """

    def __init__(
        self,
        store: AlignmentStore,
        alignment_properties: AlignmentProperties,
        config: SampleConfig | None = None,
    ):
        self.config = config or SampleConfig()
        self.alignment_properties = alignment_properties
        windows = compute_window_sizes(alignment_properties, self.config.insert_size_sd_margin)
        self.record_buffer = RecordBuffer(store, windows, self.config)
        logger.debug(
            "Sample windows: single read %d bp, read pair %d bp",
            windows.single_read_window,
            windows.read_pair_window,
        )

    @classmethod
    def from_path(
        cls,
        path: str,
        config: SampleConfig | None = None,
        reference_path: str | None = None,
        alignment_properties: AlignmentProperties | None = None,
    ) -> Sample:
        """Open an indexed BAM/CRAM and estimate its properties unless given.

        Raises:
            StoreIOError: If the file or its index cannot be opened.
            StatisticsEstimationError: If estimation fails.
        """
        config = config or SampleConfig()
        if alignment_properties is None:
            alignment_properties = estimate_alignment_properties(
                path,
                omit_insert_size=not config.use_fragment_evidence,
                reference_path=reference_path,
            )
        store = open_alignment_store(path, reference_path)
        return cls(store, alignment_properties, config)

    @property
    def max_depth(self) -> int:
        return self.config.max_depth

    @property
    def use_fragment_evidence(self) -> bool:
        return self.config.use_fragment_evidence

    @property
    def protocol_strandedness(self) -> ProtocolStrandedness:
        return self.config.protocol_strandedness

    def omits_repeat_regions(self, kind: VariantKind) -> bool:
        return VariantKind(kind) in self.config.omit_repeat_regions

    def extract_observations(self, variant: Observable) -> Pileup:
        """Extract observations for the given variant.

        Raises:
            StoreIOError: If fetching records for the variant fails.
        """
        return variant.extract_observations(
            self.record_buffer, self.alignment_properties, self.max_depth
        )

    def close(self) -> None:
        close = getattr(self.record_buffer.store, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> Sample:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
