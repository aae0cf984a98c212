"""
Deterministic randomness for competition question ordering.

Everything here is a pure function of its arguments so that every
participant of a competition sees the same sequence.
"""

import math
from collections.abc import Sequence
from typing import TypeVar

from trivia_league.config import SelectionConfig

T = TypeVar("T")

_INT32_MASK = 0xFFFFFFFF


def _to_int32(value: int) -> int:
    value &= _INT32_MASK
    return value - 0x100000000 if value & 0x80000000 else value


def hash_seed(seed: str) -> int:
    """
    31-multiplier string hash over UTF-16 code units, with signed 32-bit
    wraparound after every step.

    Returns the final value reinterpreted as unsigned, in [0, 2**32).

    Example:
        >>> hash_seed("")
        0
        >>> hash_seed("abc")
        96354
    """
    encoded = seed.encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        h = _to_int32((h << 5) - h + code_unit)
    return h & _INT32_MASK


def seeded_random(state: int) -> float:
    """
    Advances the LCG one step and returns the new state scaled to [0, 1).
    The caller keeps the running state.
    """
    next_state = (
        SelectionConfig.LCG_MULTIPLIER * state + SelectionConfig.LCG_INCREMENT
    ) % SelectionConfig.LCG_MODULUS
    return next_state / SelectionConfig.LCG_MODULUS


def seeded_shuffle(items: Sequence[T], seed: str) -> list[T]:
    """
    Fisher-Yates shuffle driven by `seeded_random`.

    Args:
        items: Sequence to shuffle. Never mutated.
        seed: Any string; equal seeds give equal permutations.

    Returns:
        A new list with the same elements in shuffled order.
    """
    shuffled = list(items)
    modulus = SelectionConfig.LCG_MODULUS
    current_seed = abs(hash_seed(seed))

    for i in range(len(shuffled) - 1, 0, -1):
        # next_state / 2**32 is exact in a double, so this is the raw state
        current_seed = int(seeded_random(current_seed) * modulus)
        j = math.floor((current_seed / modulus) * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]

    return shuffled
