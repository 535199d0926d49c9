"""Read and fragment evidence for deletions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..config import ProtocolStrandedness
from ..constants import (
    CIGAR_CONSUMES_REF,
    CIGAR_DEL,
    DEFAULT_READ_ERROR_RATE,
    DELETION_LENGTH_TOLERANCE,
    DELETION_POSITION_TOLERANCE,
)
from ..core.intervals import GenomicInterval
from .observation import Observation, Pileup, normal_pdf, prob_mapping, strand_of

if TYPE_CHECKING:
    from ..core.buffer import RecordBuffer, RecordHandle
    from ..core.properties import AlignmentProperties, InsertSize

logger = logging.getLogger(__name__)


def is_expected_orientation(record, strandedness: ProtocolStrandedness) -> bool:
    """Whether the mates of a pair lie on the strands the protocol produces."""
    same_strand = record.is_reverse == record.mate_is_reverse
    if strandedness == ProtocolStrandedness.SAME:
        return same_strand
    return not same_strand


@dataclass(frozen=True)
class Deletion:
    """Deletion of the reference bases ``[start, end)``."""

    contig: str
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"Start position must be non-negative, got {self.start}")
        if self.end <= self.start:
            raise ValueError(f"End position ({self.end}) must be greater than start ({self.start})")

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def breakpoints(self) -> tuple[GenomicInterval, GenomicInterval]:
        return (
            GenomicInterval(self.contig, self.start, self.start + 1),
            GenomicInterval(self.contig, self.end, self.end + 1),
        )

    def extract_observations(
        self,
        buffer: RecordBuffer,
        alignment_properties: AlignmentProperties,
        max_depth: int,
    ) -> Pileup:
        insert_size = alignment_properties.insert_size
        read_pair_mode = buffer.config.use_fragment_evidence and insert_size is not None

        fetches = buffer.build_fetches(read_pair_mode)
        for locus in self.breakpoints:
            fetches.push(locus)

        # Handles die with the next fetch, so observations are built per window.
        seen: set[tuple[str, int, int]] = set()
        candidates: list[Observation] = []
        for interval in fetches:
            buffer.fetch(interval, read_pair_mode)
            for record in buffer.iter_records():
                key = (record.query_name or "", record.flag, record.reference_start)
                if key in seen:
                    continue
                seen.add(key)

                observation = self.observe_read(record)
                if observation is None and read_pair_mode:
                    observation = self.observe_fragment(
                        record, insert_size, buffer.config.protocol_strandedness
                    )
                if observation is not None:
                    candidates.append(observation)

        subsample = buffer.subsample(max_depth, len(candidates))
        pileup = [observation for observation in candidates if subsample.keep()]

        logger.debug(
            "Deletion %s:%d-%d: %d fetches, %d candidates, %d observations",
            self.contig,
            self.start,
            self.end,
            len(fetches),
            len(candidates),
            len(pileup),
        )
        return pileup

    def _has_matching_deletion(self, record: RecordHandle) -> bool:
        length_tolerance = max(1, int(DELETION_LENGTH_TOLERANCE * self.length))
        ref_cursor = record.reference_start
        for op, length in record.cigartuples or ():
            if (
                op == CIGAR_DEL
                and abs(ref_cursor - self.start) <= DELETION_POSITION_TOLERANCE
                and abs(length - self.length) <= length_tolerance
            ):
                return True
            if op in CIGAR_CONSUMES_REF:
                ref_cursor += length
        return False

    def observe_read(self, record: RecordHandle) -> Observation | None:
        """Evidence from the alignment of a single read.

        A read carrying the deletion supports the alternative; a read spanning
        the whole deleted range without it supports the reference. Anything
        else is uninformative.
        """
        if self._has_matching_deletion(record):
            prob_ref, prob_alt = DEFAULT_READ_ERROR_RATE, 1.0 - DEFAULT_READ_ERROR_RATE
        elif record.reference_start < self.start and (record.reference_end or 0) > self.end:
            prob_ref, prob_alt = 1.0 - DEFAULT_READ_ERROR_RATE, DEFAULT_READ_ERROR_RATE
        else:
            return None

        return Observation(
            qname=record.query_name or "",
            prob_mapping=prob_mapping(record.mapping_quality),
            prob_ref=prob_ref,
            prob_alt=prob_alt,
            strand=strand_of(record),
            kind="single",
        )

    def observe_fragment(
        self,
        record: RecordHandle,
        insert_size: InsertSize,
        strandedness: ProtocolStrandedness,
    ) -> Observation | None:
        """Evidence from the insert size of a read pair spanning the deletion.

        Only the leftmost mate of a proper pair is used so each fragment is
        counted once.
        """
        if not (
            record.is_paired
            and record.is_proper_pair
            and not record.mate_is_unmapped
            and record.reference_id == record.next_reference_id
            and record.template_length > 0
        ):
            return None
        if not is_expected_orientation(record, strandedness):
            return None

        fragment_start = record.reference_start
        fragment_end = fragment_start + record.template_length
        if not (fragment_start < self.start and fragment_end > self.end):
            return None

        tlen = record.template_length
        return Observation(
            qname=record.query_name or "",
            prob_mapping=prob_mapping(record.mapping_quality),
            prob_ref=normal_pdf(tlen, insert_size.mean, insert_size.sd),
            prob_alt=normal_pdf(tlen - self.length, insert_size.mean, insert_size.sd),
            strand=strand_of(record),
            kind="fragment",
        )
