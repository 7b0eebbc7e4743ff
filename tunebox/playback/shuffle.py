"""
Shuffle index selection.

The controller asks an IndexPicker for the next shuffled position so the
random source can be seeded or stubbed.
"""

import random
from typing import Callable, Optional

# (queue_length, current_index) -> new index, or None when no alternative exists
IndexPicker = Callable[[int, int], Optional[int]]


class RandomIndexPicker:
    """
    Uniformly random index that is never the current one.

    Usage:
        picker = RandomIndexPicker(seed=42)
        picker(5, 2)  # any of 0, 1, 3, 4
    """

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def __call__(self, length: int, current_index: int) -> Optional[int]:
        if length < 2:
            return None

        # Draw from the length-1 other slots and skip over the current one
        choice = self._random.randrange(length - 1)
        if choice >= current_index:
            choice += 1
        return choice
