"""'Did you mean' suggestions for missing package names.

Similarity is the normalized Levenshtein ratio
``(len(longer) - distance) / len(longer)`` computed on lower-cased names.
"""

from __future__ import annotations

from typing import Iterable

SIMILARITY_THRESHOLD: float = 0.3
MAX_SUGGESTIONS: int = 5


def levenshtein(a: str, b: str) -> int:
    """Return the edit distance between two strings."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (ca != cb),
            ))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """Return a similarity score in [0, 1]; 1.0 means identical."""
    a, b = a.lower(), b.lower()
    longer = max(len(a), len(b))
    if longer == 0:
        return 1.0
    return (longer - levenshtein(a, b)) / longer


def similar_names(
    target: str,
    candidates: Iterable[str],
    *,
    limit: int = MAX_SUGGESTIONS,
    threshold: float = SIMILARITY_THRESHOLD,
) -> list[str]:
    """Return up to *limit* candidates similar to *target*, best first.

    Ties are broken alphabetically. The target itself is never suggested.
    """
    scored = [
        (similarity(target, c), c)
        for c in set(candidates)
        if c != target
    ]
    scored = [(s, c) for s, c in scored if s > threshold]
    scored.sort(key=lambda item: (-item[0], item[1]))
    return [c for _, c in scored[:limit]]
