from __future__ import annotations

from typing import Iterable, Sequence

import regex  # type: ignore


_TOKEN_RE = regex.compile(r"[\p{L}\p{M}\p{N}']+|[.,!?;:\"()\[\]-]")

NO_SPACE_BEFORE = frozenset({".", ",", "!", "?", ";", ":", ")", "]", '"'})
NO_SPACE_AFTER = frozenset({"(", "[", '"'})


def tokenize(text: str) -> list[str]:
    """Regex tokenization: letter/digit runs (apostrophes kept) + single punctuation marks."""

    if not text:
        return []
    return _TOKEN_RE.findall(text)


def ngrams(tokens: Iterable[str], n: int) -> list[tuple[str, ...]]:
    if n <= 0:
        raise ValueError("n must be >= 1")
    toks = list(tokens)
    return [tuple(toks[i : i + n]) for i in range(0, max(0, len(toks) - n + 1))]


def tokens_to_text(tokens: Sequence[str]) -> str:
    """Join tokens back into readable text, attaching punctuation to its neighbour."""

    parts: list[str] = []
    for i, token in enumerate(tokens):
        if i == 0 or token in NO_SPACE_BEFORE or tokens[i - 1] in NO_SPACE_AFTER:
            parts.append(token)
        else:
            parts.append(" " + token)
    return "".join(parts)
