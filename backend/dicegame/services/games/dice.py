import random
from typing import Tuple

DIE_FACES = 6


def roll_die(rng=None) -> int:
    """Roll a single six-sided die using ``rng`` (defaults to ``random``)."""
    source = rng if rng is not None else random
    return source.randint(1, DIE_FACES)


def roll_pair(rng=None) -> Tuple[int, int]:
    return roll_die(rng), roll_die(rng)
