"""Observations and the evidence extraction capability."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from ..constants import MIN_PROB

if TYPE_CHECKING:
    from ..core.buffer import RecordBuffer
    from ..core.properties import AlignmentProperties


@dataclass(frozen=True)
class Observation:
    """One piece of evidence for or against a candidate variant.

    ``prob_ref`` and ``prob_alt`` are likelihoods of the observed read or
    fragment given the reference and the alternative allele; they need not
    sum to one.
    """

    qname: str
    prob_mapping: float
    prob_ref: float
    prob_alt: float
    strand: str  # '+' or '-'
    kind: str = "single"  # 'single' (one read) or 'fragment' (read pair)


Pileup = list[Observation]


class Observable(Protocol):
    """Anything that can extract a pileup from a sample's record buffer."""

    def extract_observations(
        self,
        buffer: RecordBuffer,
        alignment_properties: AlignmentProperties,
        max_depth: int,
    ) -> Pileup: ...


def phred_to_prob(q: int) -> float:
    """Error probability for a phred-scaled quality."""
    if q <= 0:
        return 1.0
    return 10 ** (-q / 10)


def prob_mapping(mapq: int) -> float:
    """Probability that a read is placed correctly, from its MAPQ.

    MAPQ 255 means unavailable and is treated as uninformative.
    """
    if mapq == 255:
        return 1.0
    return max(1.0 - phred_to_prob(mapq), MIN_PROB)


def strand_of(record) -> str:
    return "-" if record.is_reverse else "+"


def normal_pdf(x: float, mean: float, sd: float) -> float:
    if sd <= 0:
        return 1.0 if x == mean else MIN_PROB
    z = (x - mean) / sd
    return max(math.exp(-0.5 * z * z) / (sd * math.sqrt(2 * math.pi)), MIN_PROB)
