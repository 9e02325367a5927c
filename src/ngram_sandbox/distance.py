from __future__ import annotations

from typing import Iterable, Sequence


def levenshtein(a: str, b: str) -> int:
    """Edit distance between two strings (insert, delete, substitute all cost 1)."""

    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    row = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        prev_diag, row[0] = row[0], i
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            prev_diag, row[j] = row[j], min(row[j] + 1, row[j - 1] + 1, prev_diag + cost)
    return row[-1]


def find_closest_token(target: str, vocab: Iterable[str]) -> str | None:
    """Return the first vocabulary token at minimal edit distance from `target`."""

    if not target:
        return None

    best: str | None = None
    best_distance = 0
    for token in vocab:
        distance = levenshtein(target, token)
        if best is None or distance < best_distance:
            best, best_distance = token, distance
            if distance == 0:
                break
    return best


def context_distance(a: Sequence[str], b: Sequence[str]) -> int:
    """Component-wise distance between two equally long contexts."""

    if len(a) != len(b):
        raise ValueError("contexts must have the same length")
    return sum(levenshtein(x, y) for x, y in zip(a, b))
