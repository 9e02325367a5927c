"""
Word-level n-gram models.

One class covers bigrams, trigrams and tetragrams; the order only fixes the
context length (order - 1). Frequency tables are flat mappings keyed by the
context tuple:

    counts[("el", "gat")] -> Counter({"dorm": 1, "menja": 1, ...})
    totals[("el", "gat")] -> 3

Every lookup has a defined miss value ([] or None) so callers can back off to
a lower order instead of handling exceptions.
"""

from __future__ import annotations

import heapq
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from .distance import context_distance, find_closest_token
from .text_cleaning import NormalizeConfig, normalize_text
from .tokenization import ngrams, tokenize

logger = logging.getLogger(__name__)

SUPPORTED_ORDERS = (2, 3, 4)

Context = Tuple[str, ...]


@dataclass(frozen=True)
class Candidate:
    """A possible next token with its count and probability."""
    token: str
    count: int
    prob: float


@dataclass(frozen=True)
class NGramEntry:
    """One learned n-gram, used for listing and exporting the tables."""
    context: Context
    next: str
    count: int
    prob: float


@dataclass(frozen=True)
class ContextDistance:
    context: Context
    distance: int

    @property
    def weight(self) -> float:
        return 1.0 / (1 + self.distance)


@dataclass
class ContextCandidates:
    """
    Result of a context-aware lookup.

    Attributes:
        context: Context whose candidates were returned (the closest one when
            the requested context was never observed)
        contexts: Observed contexts that contributed, with their distances
        candidates: Candidates sorted by descending probability
    """
    context: Context
    contexts: List[ContextDistance] = field(default_factory=list)
    candidates: List[Candidate] = field(default_factory=list)

    @property
    def is_exact(self) -> bool:
        return len(self.contexts) == 1 and self.contexts[0].distance == 0


class NGramModel:
    """
    Frequency-table n-gram model of a fixed order.

    Usage:
        model = NGramModel(order=3)
        model.train("el gat dorm. el gat menja.")
        model.get_candidates(("el", "gat"))
    """

    def __init__(self, order: int = 2, normalize_config: Optional[NormalizeConfig] = None):
        if order not in SUPPORTED_ORDERS:
            raise ValueError(f"order must be one of {SUPPORTED_ORDERS}, got {order}")
        self.order = order
        self.normalize_config = normalize_config
        self._counts: Dict[Context, Counter] = {}
        self._totals: Dict[Context, int] = {}
        self._token_counts: Counter = Counter()

    def __repr__(self) -> str:
        return (
            f"NGramModel(order={self.order}, contexts={len(self._counts)}, "
            f"vocab={len(self._token_counts)})"
        )

    @property
    def context_size(self) -> int:
        return self.order - 1

    def clear(self) -> None:
        self._counts = {}
        self._totals = {}
        self._token_counts = Counter()

    def train(self, text: str) -> None:
        """Rebuild all tables from `text`, discarding any previous state."""
        self.clear()
        tokens = tokenize(normalize_text(text, self.normalize_config))
        self._token_counts.update(tokens)

        for gram in ngrams(tokens, self.order):
            context, nxt = gram[:-1], gram[-1]
            self._counts.setdefault(context, Counter())[nxt] += 1
            self._totals[context] = self._totals.get(context, 0) + 1

        logger.debug(
            f"Trained order-{self.order} model: {len(tokens)} tokens, "
            f"{len(self._token_counts)} types, {len(self._counts)} contexts"
        )

    def is_empty(self) -> bool:
        return not self._counts

    def vocabulary(self) -> List[str]:
        """Distinct tokens in order of first appearance."""
        return list(self._token_counts)

    def token_count(self, token: str) -> int:
        return self._token_counts.get(token, 0)

    def context_count(self) -> int:
        return len(self._counts)

    def contexts(self) -> List[Context]:
        return list(self._counts)

    # ------------------------------------------------------------------
    # Exact lookup
    # ------------------------------------------------------------------

    def get_candidates(self, context: Sequence[str]) -> List[Candidate]:
        """Candidates observed after exactly `context`, most probable first."""
        key = tuple(context)
        counter = self._counts.get(key)
        if not counter:
            return []
        total = self._totals[key]
        candidates = [Candidate(token, count, count / total) for token, count in counter.items()]
        candidates.sort(key=lambda c: c.prob, reverse=True)
        return candidates

    # ------------------------------------------------------------------
    # Fuzzy resolution
    # ------------------------------------------------------------------

    def resolve_token(self, token: str) -> Optional[str]:
        if not token:
            return None
        if token in self._token_counts:
            return token
        return find_closest_token(token, self._token_counts)

    def resolve_context(self, tokens: Sequence[str]) -> Optional[Context]:
        """Resolve every position of a context; None if any position fails."""
        resolved = []
        for token in tokens:
            match = self.resolve_token(token)
            if match is None:
                return None
            resolved.append(match)
        return tuple(resolved)

    def get_most_common_token(self) -> Optional[str]:
        if not self._token_counts:
            return None
        return max(self._token_counts, key=self._token_counts.__getitem__)

    # ------------------------------------------------------------------
    # Closest contexts
    # ------------------------------------------------------------------

    def find_closest_context(self, context: Sequence[str]) -> Optional[Context]:
        """
        Observed context with the smallest summed per-token edit distance.

        Full scan over the table: O(distinct contexts) per query.
        """
        query = tuple(context)
        if len(query) != self.context_size:
            return None

        best: Optional[Context] = None
        best_score = 0
        for key in self._counts:
            score = context_distance(query, key)
            if best is None or score < best_score:
                best, best_score = key, score
                if score == 0:
                    break
        return best

    def get_closest_contexts(self, context: Sequence[str], limit: int = 3) -> List[ContextDistance]:
        query = tuple(context)
        if limit <= 0 or len(query) != self.context_size:
            return []
        scored = (ContextDistance(key, context_distance(query, key)) for key in self._counts)
        return heapq.nsmallest(limit, scored, key=lambda c: c.distance)

    def get_candidates_for_context(self, context: Sequence[str]) -> Optional[ContextCandidates]:
        """Exact candidates, or those of the single closest observed context."""
        if self.is_empty():
            return None
        query = tuple(context)
        exact = self.get_candidates(query)
        if exact:
            return ContextCandidates(query, [ContextDistance(query, 0)], exact)

        closest = self.find_closest_context(query)
        if closest is None:
            return None
        candidates = self.get_candidates(closest)
        if not candidates:
            return None
        distance = context_distance(query, closest)
        return ContextCandidates(closest, [ContextDistance(closest, distance)], candidates)

    def get_weighted_candidates_for_context(
        self, context: Sequence[str], limit: int = 3
    ) -> Optional[ContextCandidates]:
        """
        Blend the candidates of the `limit` closest observed contexts.

        Each context contributes weight * prob to its tokens, with
        weight = 1 / (1 + distance); scores are then normalized to sum to 1.
        Blended candidates carry count 0. When the exact context was seen its
        candidates are returned unchanged.
        """
        if self.is_empty():
            return None
        query = tuple(context)
        exact = self.get_candidates(query)
        if exact:
            return ContextCandidates(query, [ContextDistance(query, 0)], exact)

        closest = self.get_closest_contexts(query, limit)
        if not closest:
            return None

        scores: Dict[str, float] = {}
        for near in closest:
            for candidate in self.get_candidates(near.context):
                scores[candidate.token] = scores.get(candidate.token, 0.0) + candidate.prob * near.weight

        total = sum(scores.values())
        if total == 0:
            return None
        candidates = [Candidate(token, 0, score / total) for token, score in scores.items()]
        candidates.sort(key=lambda c: c.prob, reverse=True)
        return ContextCandidates(closest[0].context, closest, candidates)

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def entries(self, context: Optional[Sequence[str]] = None) -> List[NGramEntry]:
        """All learned n-grams, most probable first; optionally only one context."""
        if context is not None:
            keys: Iterable[Context] = [tuple(context)] if tuple(context) in self._counts else []
        else:
            keys = self._counts

        result = []
        for key in keys:
            total = self._totals[key]
            for nxt, count in self._counts[key].items():
                result.append(NGramEntry(key, nxt, count, count / total))
        result.sort(key=lambda e: e.prob, reverse=True)
        return result

    def to_frame(self, context: Optional[Sequence[str]] = None) -> pd.DataFrame:
        """Learned n-grams as a table: prev1..prevN, next, count, prob."""
        prev_cols = [f"prev{i + 1}" for i in range(self.context_size)]
        rows = [
            dict(zip(prev_cols, entry.context), next=entry.next, count=entry.count, prob=entry.prob)
            for entry in self.entries(context)
        ]
        return pd.DataFrame(rows, columns=prev_cols + ["next", "count", "prob"])


def train_model(
    text: str, order: int, normalize_config: Optional[NormalizeConfig] = None
) -> NGramModel:
    """Build and train a fresh model; retraining means calling this again and swapping."""
    model = NGramModel(order=order, normalize_config=normalize_config)
    model.train(text)
    return model
