"""Depth-bounded probabilistic thinning of candidate records."""

from __future__ import annotations

import numpy as np

from ..constants import DEFAULT_SUBSAMPLE_SEED


class SubsampleCandidates:
    """Bernoulli gate keeping on average ``max_depth`` of ``depth`` candidates.

    When ``depth <= max_depth`` no subsampling is needed and ``keep`` always
    returns True without touching the generator. Otherwise each ``keep`` call
    draws once from a generator seeded with ``seed``, so identical call
    sequences give identical keep/drop sequences.

    Not safe for concurrent use.
    """

    def __init__(self, max_depth: int, depth: int, seed: int = DEFAULT_SUBSAMPLE_SEED):
        self.max_depth = max_depth
        self.depth = depth
        self.seed = seed
        self._rng: np.random.Generator | None = None
        self.prob = 1.0
        if depth > max_depth:
            self.prob = max_depth / depth
            self._rng = np.random.default_rng(seed)

    @property
    def necessary(self) -> bool:
        return self._rng is not None

    def keep(self) -> bool:
        if self._rng is None:
            return True
        return bool(self._rng.random() <= self.prob)

    def __repr__(self) -> str:
        if self.necessary:
            return f"SubsampleCandidates(prob={self.prob:.4f}, seed={self.seed})"
        return "SubsampleCandidates(not needed)"
