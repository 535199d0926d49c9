"""Single-read evidence for single nucleotide variants."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..constants import (
    CIGAR_DEL,
    CIGAR_DIFF,
    CIGAR_EQUAL,
    CIGAR_HARD_CLIP,
    CIGAR_INS,
    CIGAR_MATCH,
    CIGAR_PAD,
    CIGAR_REF_SKIP,
    CIGAR_SOFT_CLIP,
    DEFAULT_READ_ERROR_RATE,
)
from ..core.intervals import GenomicInterval
from .observation import Observation, Pileup, phred_to_prob, prob_mapping, strand_of

if TYPE_CHECKING:
    from ..core.buffer import RecordBuffer, RecordHandle
    from ..core.properties import AlignmentProperties

logger = logging.getLogger(__name__)

BASES = frozenset("ACGT")


def get_query_position(record, ref_pos: int) -> int | None:
    """Get the query (read) position aligned to a reference position.

    Walks the CIGAR tuples. Returns None if the reference position falls in a
    deletion or skip, or is not covered by the read.
    """
    if not record.cigartuples or record.reference_start is None:
        return None

    query_pos = 0
    ref_cursor = record.reference_start

    for op, length in record.cigartuples:
        if op in (CIGAR_MATCH, CIGAR_EQUAL, CIGAR_DIFF):
            # Match/mismatch: consumes both query and reference
            if ref_cursor <= ref_pos < ref_cursor + length:
                return query_pos + (ref_pos - ref_cursor)
            query_pos += length
            ref_cursor += length
        elif op in (CIGAR_INS, CIGAR_SOFT_CLIP):
            query_pos += length
        elif op in (CIGAR_DEL, CIGAR_REF_SKIP):
            if ref_cursor <= ref_pos < ref_cursor + length:
                return None
            ref_cursor += length
        elif op in (CIGAR_HARD_CLIP, CIGAR_PAD):
            # Consumes nothing
            continue
        if ref_cursor > ref_pos:
            break

    return None


@dataclass(frozen=True)
class SNV:
    """A single nucleotide variant at 0-based position ``pos``."""

    contig: str
    pos: int
    ref: str
    alt: str

    def __post_init__(self) -> None:
        for name, base in (("ref", self.ref), ("alt", self.alt)):
            if base.upper() not in BASES:
                raise ValueError(f"Invalid {name} base: '{base}'")
        if self.ref.upper() == self.alt.upper():
            raise ValueError(f"ref and alt must differ, got '{self.ref}' twice")

    @property
    def interval(self) -> GenomicInterval:
        return GenomicInterval(self.contig, self.pos, self.pos + 1)

    def extract_observations(
        self,
        buffer: RecordBuffer,
        alignment_properties: AlignmentProperties,
        max_depth: int,
    ) -> Pileup:
        buffer.fetch(self.interval, read_pair_mode=False)

        candidates = [
            record
            for record in buffer.iter_records()
            if record.reference_start <= self.pos < (record.reference_end or record.reference_start)
        ]
        subsample = buffer.subsample(max_depth, len(candidates))

        pileup: Pileup = []
        for record in candidates:
            if not subsample.keep():
                continue
            observation = self.observe(record)
            if observation is not None:
                pileup.append(observation)

        logger.debug(
            "SNV %s:%d %s>%s: %d candidates, %d observations",
            self.contig,
            self.pos,
            self.ref,
            self.alt,
            len(candidates),
            len(pileup),
        )
        return pileup

    def observe(self, record: RecordHandle) -> Observation | None:
        """Turn the base a record shows at ``pos`` into an observation."""
        qpos = get_query_position(record, self.pos)
        seq = record.query_sequence
        if qpos is None or not seq or qpos >= len(seq):
            return None

        base = seq[qpos].upper()
        quals = record.query_qualities
        error = phred_to_prob(int(quals[qpos])) if quals is not None else DEFAULT_READ_ERROR_RATE
        ref = self.ref.upper()
        alt = self.alt.upper()

        # Sequencing errors are spread evenly over the other three bases
        prob_ref = 1.0 - error if base == ref else error / 3.0
        prob_alt = 1.0 - error if base == alt else error / 3.0

        return Observation(
            qname=record.query_name or "",
            prob_mapping=prob_mapping(record.mapping_quality),
            prob_ref=prob_ref,
            prob_alt=prob_alt,
            strand=strand_of(record),
        )
