"""
services/randomizer.py

Uniform in-place shuffle (Fisher–Yates).
Used separately for question order and for each question's option order.
"""

import random
from typing import MutableSequence, Optional, TypeVar

T = TypeVar("T")


def shuffle(items: MutableSequence[T], rng: Optional[random.Random] = None) -> MutableSequence[T]:
    """
    Shuffle ``items`` in place and return the same sequence.

    Args:
        items: any mutable sequence. Empty and single-element sequences are left as is.
        rng:   random source. Defaults to the module-level ``random`` generator.

    Returns:
        ``items`` itself, reordered.
    """
    randint = rng.randint if rng is not None else random.randint
    for i in range(len(items) - 1, 0, -1):
        j = randint(0, i)
        items[i], items[j] = items[j], items[i]
    return items
