from __future__ import annotations

import random
from typing import Any, Sequence

from hotcore.contracts import RandomSource


class PythonRandomSource(RandomSource):
    """Injected randomness for autoplay bots; the engine itself never draws."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def rand(self) -> float:
        return self._rng.random()

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def choice(self, items: Sequence[Any]) -> Any:
        if not items:
            raise ValueError("choice items must not be empty")
        return self._rng.choice(items)


def seeded_random(seed: int | None) -> PythonRandomSource:
    return PythonRandomSource(seed=seed)
