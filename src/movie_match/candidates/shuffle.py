import random
from typing import TypeVar

T = TypeVar("T")


def fisher_yates_shuffle(items: list[T], rng: random.Random | None = None) -> list[T]:
    """Return a uniformly shuffled copy of ``items``.

    For i from the last index down to 1, swap i with a random index in
    ``0..i`` inclusive. Pass a seeded ``random.Random`` for a reproducible
    order.
    """
    rng = rng or random.Random()
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result
