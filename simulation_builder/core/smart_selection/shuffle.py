"""
Unpredictable shuffling for question sets.

Students generate simulations repeatedly; if the ordering came from a
seedable PRNG they could learn which questions tend to appear early. The
permutation is therefore driven by the operating system CSPRNG through
``secrets``.
"""

import secrets
from typing import Iterable, List, TypeVar

T = TypeVar("T")


def secure_shuffle(items: Iterable[T]) -> List[T]:
    """
    Return a uniformly random permutation of ``items``.

    Fisher-Yates over a copy; the input is not modified. Every element
    appears exactly once in the output.

    Args:
        items: Any iterable of items.

    Returns:
        New list containing the same items in random order.
    """
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = secrets.randbelow(i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled
