"""Per-sample configuration for bamwindow, optionally loaded from environment variables."""

import os
from dataclasses import dataclass, field
from enum import Enum

from .constants import (
    DEFAULT_INSERT_SIZE_SD_MARGIN,
    DEFAULT_MAX_DEPTH,
    DEFAULT_PROTOCOL_STRANDEDNESS,
    DEFAULT_SUBSAMPLE_SEED,
    DEFAULT_USE_FRAGMENT_EVIDENCE,
)


class ProtocolStrandedness(str, Enum):
    """Strand combination for read pairs as given by the sequencing protocol."""

    OPPOSITE = "opposite"
    SAME = "same"


class VariantKind(str, Enum):
    """Kinds of variants evidence can be extracted for."""

    SNV = "snv"
    MNV = "mnv"
    INSERTION = "insertion"
    DELETION = "deletion"
    BREAKEND = "breakend"
    INVERSION = "inversion"
    DUPLICATION = "duplication"
    REPLACEMENT = "replacement"


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes"):
        return True
    if value in ("0", "false", "no"):
        return False
    raise ValueError(f"Invalid boolean value: '{raw}'")


def _parse_variant_kinds(raw: str) -> frozenset[VariantKind]:
    kinds = set()
    for item in raw.split(","):
        item = item.strip().lower()
        if not item:
            continue
        try:
            kinds.add(VariantKind(item))
        except ValueError as e:
            valid = ", ".join(k.value for k in VariantKind)
            raise ValueError(f"Unknown variant kind '{item}'. Expected one of: {valid}") from e
    return frozenset(kinds)


@dataclass
class SampleConfig:
    """Settings for one sequenced sample.

    Every option is listed here with its default and checked on construction.
    """

    use_fragment_evidence: bool = DEFAULT_USE_FRAGMENT_EVIDENCE
    max_depth: int = DEFAULT_MAX_DEPTH
    omit_repeat_regions: frozenset[VariantKind] = field(default_factory=frozenset)
    protocol_strandedness: ProtocolStrandedness = ProtocolStrandedness(
        DEFAULT_PROTOCOL_STRANDEDNESS
    )
    subsample_seed: int = DEFAULT_SUBSAMPLE_SEED
    insert_size_sd_margin: float = DEFAULT_INSERT_SIZE_SD_MARGIN

    def __post_init__(self) -> None:
        """Validate config values and normalize collection/enum fields."""
        self.omit_repeat_regions = frozenset(VariantKind(k) for k in self.omit_repeat_regions)
        self.protocol_strandedness = ProtocolStrandedness(self.protocol_strandedness)

        if self.max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {self.max_depth}")

        if self.subsample_seed < 0:
            raise ValueError(f"subsample_seed must be non-negative, got {self.subsample_seed}")

        if self.insert_size_sd_margin < 0:
            raise ValueError(
                f"insert_size_sd_margin must be non-negative, got {self.insert_size_sd_margin}"
            )

    @classmethod
    def from_env(cls, strict: bool = False) -> "SampleConfig":
        """Create config from environment variables.

        Args:
            strict: If True, the protocol strandedness must be given explicitly
                instead of falling back to the default.

        Raises:
            ValueError: If a variable is malformed, or missing in strict mode.
        """
        env = os.environ

        strandedness = env.get("BAMWINDOW_PROTOCOL_STRANDEDNESS")
        if strandedness is None:
            if strict:
                raise ValueError(
                    "BAMWINDOW_PROTOCOL_STRANDEDNESS must be set when strict configuration is requested"
                )
            strandedness = DEFAULT_PROTOCOL_STRANDEDNESS

        try:
            protocol_strandedness = ProtocolStrandedness(strandedness.strip().lower())
        except ValueError as e:
            raise ValueError(
                f"protocol_strandedness must be 'same' or 'opposite', got '{strandedness}'"
            ) from e

        return cls(
            use_fragment_evidence=_parse_bool(
                env.get("BAMWINDOW_USE_FRAGMENT_EVIDENCE", str(DEFAULT_USE_FRAGMENT_EVIDENCE))
            ),
            max_depth=int(env.get("BAMWINDOW_MAX_DEPTH", str(DEFAULT_MAX_DEPTH))),
            omit_repeat_regions=_parse_variant_kinds(env.get("BAMWINDOW_OMIT_REPEAT_REGIONS", "")),
            protocol_strandedness=protocol_strandedness,
            subsample_seed=int(env.get("BAMWINDOW_SUBSAMPLE_SEED", str(DEFAULT_SUBSAMPLE_SEED))),
            insert_size_sd_margin=float(
                env.get("BAMWINDOW_INSERT_SIZE_SD_MARGIN", str(DEFAULT_INSERT_SIZE_SD_MARGIN))
            ),
        )
