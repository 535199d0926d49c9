"""Pileup and alignment property serialization for command line output.

Converts observations and estimated statistics into JSON-compatible dicts,
with a per-pileup summary of supporting evidence.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

from .properties import AlignmentProperties

if TYPE_CHECKING:
    from ..evidence.observation import Observation


def serialize_alignment_properties(props: AlignmentProperties) -> dict:
    d: dict[str, Any] = {
        "max_read_len": props.max_read_len,
        "max_del_cigar_len": props.max_del_cigar_len,
        "max_ins_cigar_len": props.max_ins_cigar_len,
        "insert_size": None,
    }
    if props.insert_size is not None:
        d["insert_size"] = {
            "mean": round(props.insert_size.mean, 3),
            "sd": round(props.insert_size.sd, 3),
        }
    return d


def _summarize(pileup: Sequence[Observation]) -> dict:
    """Count observations by the allele they favour, strand and kind."""
    supports_alt = sum(1 for o in pileup if o.prob_alt > o.prob_ref)
    supports_ref = sum(1 for o in pileup if o.prob_ref > o.prob_alt)
    return {
        "depth": len(pileup),
        "supports_alt": supports_alt,
        "supports_ref": supports_ref,
        "ambiguous": len(pileup) - supports_alt - supports_ref,
        "forward": sum(1 for o in pileup if o.strand == "+"),
        "reverse": sum(1 for o in pileup if o.strand == "-"),
        "fragments": sum(1 for o in pileup if o.kind == "fragment"),
    }


def serialize_pileup(
    pileup: Sequence[Observation],
    variant: dict | None = None,
    include_observations: bool = True,
) -> dict:
    """Serialize a pileup with its summary.

    Args:
        pileup: Observations in extraction order.
        variant: Optional description of the queried variant, echoed back.
        include_observations: If False, only the summary is returned.
    """
    result: dict[str, Any] = {"summary": _summarize(pileup)}
    if variant is not None:
        result["variant"] = variant
    if include_observations:
        result["observations"] = [asdict(o) for o in pileup]
    return result
