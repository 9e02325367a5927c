from __future__ import annotations

from dataclasses import replace
from typing import Sequence

import numpy as np

from .models import Candidate


def apply_temperature(candidates: Sequence[Candidate], temperature: float) -> list[Candidate]:
    """Raise probabilities to 1/temperature and renormalize.

    Temperature <= 0 leaves the input untouched; greedy decoding is the
    caller's job (see `choose_candidate`).
    """

    if not candidates:
        return []
    if temperature <= 0:
        return list(candidates)

    probs = np.array([c.prob for c in candidates], dtype=float)
    peak = probs.max()
    if peak <= 0:
        return list(candidates)

    # scaled by the mode so the top entry stays 1.0 and cannot underflow
    adjusted = np.power(probs / peak, 1.0 / temperature)
    adjusted /= adjusted.sum()
    return [replace(c, prob=float(p)) for c, p in zip(candidates, adjusted)]


def sample_candidate(
    candidates: Sequence[Candidate], rng: np.random.Generator | None = None
) -> Candidate | None:
    """Draw one candidate proportionally to its probability.

    Walks the list in order; if rounding leaves mass unassigned the last
    candidate is returned.
    """

    if not candidates:
        return None
    generator = rng if rng is not None else np.random.default_rng()
    threshold = float(generator.random())
    for candidate in candidates:
        threshold -= candidate.prob
        if threshold <= 0:
            return candidate
    return candidates[-1]


def choose_candidate(
    candidates: Sequence[Candidate],
    temperature: float,
    rng: np.random.Generator | None = None,
) -> Candidate | None:
    if not candidates:
        return None
    if temperature <= 0:
        return max(candidates, key=lambda c: c.prob)
    return sample_candidate(apply_temperature(candidates, temperature), rng=rng)
