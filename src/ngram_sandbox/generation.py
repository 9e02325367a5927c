"""
Generation Module

Chains the three model orders into a single backoff function and turns its
output into tokens:

    tetragram (weighted closest contexts) -> trigram -> bigram -> most common token

The chain only ever moves down. The last step needs no context, so generation
never dead-ends while the corpus holds at least one token.

Usage:
    models = ModelSet.train(corpus)
    generator = Generator(models, temperature=0.7)
    tokens = generator.generate(prepare_tokens("el gat"), order=4, count=10)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

import numpy as np

from .models import (
    SUPPORTED_ORDERS,
    Candidate,
    Context,
    ContextCandidates,
    ContextDistance,
    NGramModel,
    train_model,
)
from .sampling import apply_temperature, choose_candidate
from .text_cleaning import NormalizeConfig, normalize_text
from .tokenization import tokenize

logger = logging.getLogger(__name__)


def prepare_tokens(text: str, normalize_config: Optional[NormalizeConfig] = None) -> List[str]:
    """Normalize and tokenize seed text the same way training does."""
    return tokenize(normalize_text(text, normalize_config))


@dataclass(frozen=True)
class ModelSet:
    """
    Bigram, trigram and tetragram models trained on the same corpus.

    Instances are never mutated after training; `retrain` returns a new set so
    a holder can swap the reference while readers keep using the old one.
    """
    bigram: NGramModel
    trigram: NGramModel
    tetragram: NGramModel
    corpus: str = ""

    @classmethod
    def train(cls, text: str, normalize_config: Optional[NormalizeConfig] = None) -> "ModelSet":
        models = cls(
            bigram=train_model(text, 2, normalize_config),
            trigram=train_model(text, 3, normalize_config),
            tetragram=train_model(text, 4, normalize_config),
            corpus=text,
        )
        logger.info(
            f"Trained models on {len(models.bigram.vocabulary())} types: "
            f"{models.bigram.context_count()} bigram, {models.trigram.context_count()} trigram, "
            f"{models.tetragram.context_count()} tetragram contexts"
        )
        return models

    def retrain(self, text: str) -> "ModelSet":
        return ModelSet.train(text, self.bigram.normalize_config)

    def model(self, order: int) -> NGramModel:
        if order == 2:
            return self.bigram
        if order == 3:
            return self.trigram
        if order == 4:
            return self.tetragram
        raise ValueError(f"order must be one of {SUPPORTED_ORDERS}, got {order}")

    def is_empty(self) -> bool:
        """True when the corpus produced no tokens at all."""
        return self.bigram.get_most_common_token() is None


@dataclass
class Resolution:
    """
    Where the backoff chain found candidates.

    Attributes:
        order: Model order that answered (1 = most-common-token fallback)
        lookup: Context used, contexts blended and the raw candidates
    """
    order: int
    lookup: ContextCandidates

    @property
    def context(self) -> Context:
        return self.lookup.context

    @property
    def candidates(self) -> List[Candidate]:
        return self.lookup.candidates


@dataclass
class GenerationStep:
    """One generated token together with what the models saw to produce it."""
    token: str
    order: int
    context: Context
    contexts: List[ContextDistance] = field(default_factory=list)
    candidates: List[Candidate] = field(default_factory=list)
    alternatives: List[Candidate] = field(default_factory=list)


class Generator:
    """
    Backoff generator over a ModelSet.

    Orders listed in `weighted_orders` are treated as sparse: an unseen context
    is answered by blending the `closest_limit` nearest observed contexts
    instead of missing.
    """

    def __init__(
        self,
        models: ModelSet,
        temperature: float = 0.7,
        closest_limit: int = 3,
        weighted_orders: Sequence[int] = (4,),
        rng: Optional[np.random.Generator] = None,
    ):
        self.models = models
        self.temperature = temperature
        self.closest_limit = closest_limit
        self.weighted_orders = tuple(weighted_orders)
        self.rng = rng if rng is not None else np.random.default_rng()

    @property
    def temperature(self) -> float:
        return self._temperature

    @temperature.setter
    def temperature(self, value: float) -> None:
        if value < 0:
            raise ValueError(f"temperature must be >= 0, got {value}")
        self._temperature = float(value)

    def swap_models(self, models: ModelSet) -> None:
        self.models = models

    def resolve(self, tokens: Sequence[str], order: int) -> Optional[Resolution]:
        """Walk the backoff chain from `order` down; None only for an empty corpus."""
        if order not in SUPPORTED_ORDERS:
            raise ValueError(f"order must be one of {SUPPORTED_ORDERS}, got {order}")

        for k in range(order, 1, -1):
            lookup = self._lookup(self.models.model(k), tokens)
            if lookup is not None:
                return Resolution(order=k, lookup=lookup)
            logger.debug(f"No candidates at order {k}, backing off")

        token = self.models.bigram.get_most_common_token()
        if token is None:
            return None
        fallback = Candidate(token, self.models.bigram.token_count(token), 1.0)
        return Resolution(order=1, lookup=ContextCandidates((), [], [fallback]))

    def _lookup(self, model: NGramModel, tokens: Sequence[str]) -> Optional[ContextCandidates]:
        size = model.context_size
        if len(tokens) < size:
            return None
        context = model.resolve_context(tokens[len(tokens) - size:])
        if context is None:
            return None

        if model.order in self.weighted_orders:
            lookup = model.get_weighted_candidates_for_context(context, self.closest_limit)
            return lookup if lookup is not None and lookup.candidates else None

        candidates = model.get_candidates(context)
        if not candidates:
            return None
        return ContextCandidates(context, [ContextDistance(context, 0)], candidates)

    def step(self, tokens: Sequence[str], order: int) -> Optional[GenerationStep]:
        resolution = self.resolve(tokens, order)
        if resolution is None:
            return None

        chosen = choose_candidate(resolution.candidates, self.temperature, rng=self.rng)
        if chosen is None:
            return None
        return GenerationStep(
            token=chosen.token,
            order=resolution.order,
            context=resolution.context,
            contexts=resolution.lookup.contexts,
            candidates=resolution.candidates,
            alternatives=apply_temperature(resolution.candidates, self.temperature),
        )

    def next_token(self, tokens: Sequence[str], order: int) -> Optional[str]:
        result = self.step(tokens, order)
        return result.token if result else None

    def generate(self, tokens: Sequence[str], order: int, count: int) -> List[str]:
        """Generate up to `count` tokens after `tokens`; stops early if the chain runs dry."""
        current = list(tokens)
        generated: List[str] = []
        for _ in range(count):
            token = self.next_token(current, order)
            if token is None:
                break
            generated.append(token)
            current.append(token)
        return generated


class AnimatedGeneration:
    """
    Token-by-token generation driven at a fixed interval.

    `tick` produces exactly one token, so a stop request always lands on a
    token boundary. Stopping twice is harmless.
    """

    def __init__(
        self,
        generator: Generator,
        seed_tokens: Sequence[str],
        order: int,
        interval: float = 0.2,
    ):
        self.generator = generator
        self.seed_tokens = list(seed_tokens)
        self.order = order
        self.interval = interval
        self.generated: List[str] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    def stop(self) -> None:
        self._running = False

    def tick(self) -> Optional[str]:
        if not self._running:
            return None
        token = self.generator.next_token(self.seed_tokens + self.generated, self.order)
        if token is None:
            logger.info("Generation cannot continue, stopping animation")
            self.stop()
            return None
        self.generated.append(token)
        return token

    def run(
        self,
        max_tokens: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
        on_token: Optional[Callable[[str], None]] = None,
    ) -> List[str]:
        produced: List[str] = []
        while self._running and (max_tokens is None or len(produced) < max_tokens):
            token = self.tick()
            if token is None:
                break
            produced.append(token)
            if on_token is not None:
                on_token(token)
            if self._running:
                sleep(self.interval)
        return produced


@dataclass
class ContextFragment:
    """Slice of the corpus around an occurrence of a context."""
    tokens: List[str]
    context_start: int
    context_end: int
    next_index: Optional[int]


def find_context_fragment(
    tokens: Sequence[str], context: Sequence[str], window: int = 6
) -> Optional[ContextFragment]:
    """First occurrence of `context` in `tokens`, with `window` tokens of margin."""
    size = len(context)
    if size == 0 or size > len(tokens):
        return None

    target = list(context)
    for i in range(len(tokens) - size + 1):
        if list(tokens[i : i + size]) != target:
            continue
        start = max(0, i - window)
        end = min(len(tokens), i + size + window)
        next_pos = i + size
        return ContextFragment(
            tokens=list(tokens[start:end]),
            context_start=i - start,
            context_end=i - start + size - 1,
            next_index=next_pos - start if next_pos < end else None,
        )
    return None
