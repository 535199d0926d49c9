"""Estimation of read length and insert size statistics from an alignment store."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
import pysam

from ..constants import (
    CIGAR_DEL,
    CIGAR_INS,
    DEFAULT_ESTIMATION_RECORDS,
    INSERT_SIZE_IQR_FACTOR,
)
from ..errors import StatisticsEstimationError, StoreIOError
from .buffer import is_valid_record
from .store import open_alignment_store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InsertSize:
    """Fragment insert size distribution (bp)."""

    mean: float
    sd: float


@dataclass(frozen=True)
class AlignmentProperties:
    """Empirical properties of the alignments in one sample.

    Attributes
    ----------
    insert_size:
        Insert size distribution of proper pairs, or None if it was not
        estimated (e.g. single-end data).
    max_read_len:
        Longest query length seen.
    max_del_cigar_len:
        Longest deletion (``D``) operation in any sampled CIGAR.
    max_ins_cigar_len:
        Longest insertion (``I``) operation in any sampled CIGAR.
    """

    insert_size: InsertSize | None
    max_read_len: int
    max_del_cigar_len: int = 0
    max_ins_cigar_len: int = 0

    @classmethod
    def estimate(
        cls,
        records: Iterable[pysam.AlignedSegment],
        omit_insert_size: bool = False,
        max_records: int = DEFAULT_ESTIMATION_RECORDS,
    ) -> AlignmentProperties:
        """Estimate properties from the first ``max_records`` usable records.

        Raises:
            StatisticsEstimationError: If no usable record is found, or insert
                sizes are required but no proper pair is found.
        """
        max_read_len = 0
        max_del = 0
        max_ins = 0
        tlens: list[int] = []
        seen = 0

        for record in records:
            if seen >= max_records:
                break
            if not is_valid_record(record) or record.is_supplementary:
                continue

            read_len = record.infer_read_length() or record.query_length
            if not read_len:
                continue
            seen += 1
            max_read_len = max(max_read_len, read_len)

            for op, length in record.cigartuples or ():
                if op == CIGAR_DEL:
                    max_del = max(max_del, length)
                elif op == CIGAR_INS:
                    max_ins = max(max_ins, length)

            # Count each fragment once, via the mate with positive template length
            if (
                not omit_insert_size
                and record.is_paired
                and record.is_proper_pair
                and not record.mate_is_unmapped
                and record.reference_id == record.next_reference_id
                and record.template_length > 0
            ):
                tlens.append(record.template_length)

        if seen == 0:
            raise StatisticsEstimationError("No usable alignment records to estimate properties from")

        insert_size = None
        if not omit_insert_size:
            insert_size = _estimate_insert_size(tlens)

        props = cls(
            insert_size=insert_size,
            max_read_len=max_read_len,
            max_del_cigar_len=max_del,
            max_ins_cigar_len=max_ins,
        )
        logger.info("Estimated alignment properties from %d records: %s", seen, props)
        return props


def _estimate_insert_size(tlens: list[int]) -> InsertSize:
    """Mean and sample sd of template lengths after removing Tukey outliers."""
    if not tlens:
        raise StatisticsEstimationError(
            "No proper read pairs found; cannot estimate insert size "
            "(omit insert size estimation for single-end data)"
        )

    values = np.asarray(tlens, dtype=np.float64)
    q1, q3 = np.percentile(values, [25, 75])
    iqr = q3 - q1
    lower = q1 - INSERT_SIZE_IQR_FACTOR * iqr
    upper = q3 + INSERT_SIZE_IQR_FACTOR * iqr
    kept = values[(values >= lower) & (values <= upper)]

    dropped = len(values) - len(kept)
    if dropped:
        logger.debug("Dropped %d insert size outliers outside [%.1f, %.1f]", dropped, lower, upper)
    if len(kept) < 2:
        logger.warning("Only %d read pair(s) for insert size estimation; sd set to 0", len(kept))
        return InsertSize(mean=float(kept.mean()), sd=0.0)

    return InsertSize(mean=float(kept.mean()), sd=float(kept.std(ddof=1)))


def estimate_alignment_properties(
    path: str,
    omit_insert_size: bool = False,
    reference_path: str | None = None,
    max_records: int = DEFAULT_ESTIMATION_RECORDS,
) -> AlignmentProperties:
    """
    Estimate alignment properties by scanning a BAM/CRAM file from its start.

    Args:
        path: Path to BAM/CRAM file. No index is needed.
        omit_insert_size: Skip insert size estimation (single-end data).
        reference_path: Path to reference FASTA (required for CRAM).
        max_records: Number of usable records to sample.

    Raises:
        StoreIOError: If the file cannot be opened or read.
        StatisticsEstimationError: If the sampled records are unusable.
    """
    with open_alignment_store(path, reference_path, require_index=False) as store:
        try:
            return AlignmentProperties.estimate(
                store.fetch(until_eof=True),
                omit_insert_size=omit_insert_size,
                max_records=max_records,
            )
        except OSError as e:
            raise StoreIOError(f"Failed to read alignment store '{path}': {e}") from e
