from __future__ import annotations

import math
import random
from typing import Sequence, TypeVar

T = TypeVar("T")


class EmptyInputError(ValueError):
    """Raised when a random pick is requested from an empty sequence."""


def make_rng(seed: int | None = None) -> random.Random:
    return random.Random(seed)


def pick_one(rng: random.Random, items: Sequence[T]) -> T:
    if not items:
        raise EmptyInputError("cannot pick from an empty sequence")
    return items[int(rng.random() * len(items))]


def range_value(rng: random.Random, low: float, high: float) -> float:
    """Uniform value in ``[low, high)``."""
    return rng.random() * (high - low) + low


def range_int(rng: random.Random, low: int, high: int) -> int:
    """Floor of a uniform draw in ``[low, high)``; always in ``[low, high - 1]``."""
    value = int(math.floor(range_value(rng, low, high)))
    # float rounding can land exactly on ``high``
    return max(low, min(value, high - 1))
