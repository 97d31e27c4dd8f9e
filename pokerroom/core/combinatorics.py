"""
Subset enumeration helpers.

Nothing here knows about cards: the hand evaluator picks the best five of
seven cards with ``best_subset``, but any k-of-n search can use it.
"""

from __future__ import annotations
from itertools import combinations
from math import comb
from typing import Callable, Iterator, Sequence, Tuple, TypeVar, Any

T = TypeVar("T")


def subsets(items: Sequence[T], k: int) -> Iterator[Tuple[T, ...]]:
    """
    Yield every k-element subset of items, in lexicographic index order.

    Raises:
        ValueError: If k is negative or larger than len(items).
    """
    if k < 0 or k > len(items):
        raise ValueError(f"Cannot choose {k} of {len(items)} items")
    return combinations(items, k)


def subset_count(n: int, k: int) -> int:
    """Number of k-element subsets of an n-element set."""
    return comb(n, k)


def best_subset(
    items: Sequence[T],
    k: int,
    key: Callable[[Tuple[T, ...]], Any],
) -> Tuple[Tuple[T, ...], Any]:
    """
    Find the k-subset maximising key.

    On ties the first subset in enumeration order wins.

    Returns:
        Tuple of (best subset, its key value)
    """
    best = None
    best_value = None
    for subset in subsets(items, k):
        value = key(subset)
        if best is None or value > best_value:
            best, best_value = subset, value
    if best is None:
        raise ValueError("No subsets to choose from")
    return best, best_value
