"""Opening BAM/CRAM alignment stores with pysam."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

import pysam

from ..errors import StoreIOError

logger = logging.getLogger(__name__)


class AlignmentStore(Protocol):
    """The part of ``pysam.AlignmentFile`` the record buffer relies on."""

    def fetch(self, contig: str, start: int, stop: int) -> Iterable[pysam.AlignedSegment]: ...


def open_alignment_store(
    path: str,
    reference_path: str | None = None,
    index_filename: str | None = None,
    require_index: bool = True,
) -> pysam.AlignmentFile:
    """
    Open a BAM/CRAM file for reading.

    Args:
        path: Path to the BAM/CRAM file.
        reference_path: Path to reference FASTA (required for CRAM).
        index_filename: Explicit path to the .bai/.crai index.
        require_index: Fail unless an index is found. Region fetches need
            one; sequential scans do not.

    Returns:
        An open ``pysam.AlignmentFile``. The caller owns and closes it.

    Raises:
        StoreIOError: If the file or its index is missing or corrupt.
    """
    mode = "rc" if path.endswith(".cram") else "rb"

    try:
        store = pysam.AlignmentFile(
            path,
            mode,  # type: ignore[arg-type]
            reference_filename=reference_path,
            index_filename=index_filename,
            require_index=require_index,
        )
    except (OSError, ValueError) as e:
        raise StoreIOError(f"Cannot open alignment store '{path}': {e}") from e

    logger.debug("Opened alignment store %s (index required: %s)", path, require_index)
    return store
