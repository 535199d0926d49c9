"""Shared constants for bamwindow runtime defaults and thresholds.

This module is the single source of truth for default values that are consumed
across configuration loading, window sizing, subsampling, and statistics
estimation.
"""

from __future__ import annotations

# Sample configuration defaults
DEFAULT_MAX_DEPTH = 200
DEFAULT_USE_FRAGMENT_EVIDENCE = True
DEFAULT_PROTOCOL_STRANDEDNESS = "opposite"

# Fixed seed so that subsampling is reproducible across runs
DEFAULT_SUBSAMPLE_SEED = 48_074_578

# Read-pair window = mean insert size + margin * sd.
# Six standard deviations captures effectively all fragments under a normal
# approximation.
DEFAULT_INSERT_SIZE_SD_MARGIN = 6.0

# Alignment property estimation
DEFAULT_ESTIMATION_RECORDS = 10_000
INSERT_SIZE_IQR_FACTOR = 1.5

# CIGAR operation codes
CIGAR_MATCH = 0  # M
CIGAR_INS = 1  # I
CIGAR_DEL = 2  # D
CIGAR_REF_SKIP = 3  # N
CIGAR_SOFT_CLIP = 4  # S
CIGAR_HARD_CLIP = 5  # H
CIGAR_PAD = 6  # P
CIGAR_EQUAL = 7  # =
CIGAR_DIFF = 8  # X

CIGAR_CONSUMES_QUERY = (CIGAR_MATCH, CIGAR_INS, CIGAR_SOFT_CLIP, CIGAR_EQUAL, CIGAR_DIFF)
CIGAR_CONSUMES_REF = (CIGAR_MATCH, CIGAR_DEL, CIGAR_REF_SKIP, CIGAR_EQUAL, CIGAR_DIFF)

# Evidence heuristics
MIN_PROB = 1e-12
# Used where a read carries no per-base qualities
DEFAULT_READ_ERROR_RATE = 0.01
# How far (bp) a CIGAR deletion may sit from the queried start and still count
DELETION_POSITION_TOLERANCE = 10
# Relative length difference tolerated between CIGAR and queried deletion
DELETION_LENGTH_TOLERANCE = 0.1
