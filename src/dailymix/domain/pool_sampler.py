import random
from collections.abc import Mapping, Sequence
from typing import Protocol, TypeVar

from src.dailymix.domain.models import Difficulty, MixCounts


class Candidate(Protocol):
    @property
    def id(self) -> str: ...


T = TypeVar("T")
C = TypeVar("C", bound=Candidate)


def _resolve(rng: random.Random | None) -> random.Random:
    return rng if rng is not None else random.Random()


def shuffle(items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Uniform random permutation of a copy of ``items``."""
    shuffled = list(items)
    _resolve(rng).shuffle(shuffled)
    return shuffled


def sample(items: Sequence[T], n: int, rng: random.Random | None = None) -> list[T]:
    """Up to ``n`` items drawn without replacement, in random order."""
    if n <= 0:
        return []
    return shuffle(items, rng)[: min(n, len(items))]


def select_questions(
    counts: MixCounts,
    pools: Mapping[Difficulty, Sequence[C]],
    rng: random.Random | None = None,
) -> list[C]:
    """
    Assemble up to ``counts.total`` candidates from per-band pools.

    Each band is sampled for its own count first. Bands that come up short
    are then topped up from the other pools, visited in random order, with
    candidates already chosen (by id) excluded. When the pools together hold
    fewer unique candidates than requested, the result is shorter than
    ``counts.total``; callers decide what to do about it.

    The pools are never mutated.
    """
    rng = _resolve(rng)

    chosen: list[C] = []
    deficits: dict[Difficulty, int] = {}

    # 1. Sample each band for its own count
    for band in Difficulty:
        need = counts.get(band)
        picked = sample(pools.get(band, ()), need, rng)
        chosen.extend(picked)
        if len(picked) < need:
            deficits[band] = need - len(picked)

    # 2. Fill deficits from the pools in random order
    chosen_ids = {c.id for c in chosen}
    for band in shuffle(list(Difficulty), rng):
        if not deficits:
            break

        available = [c for c in pools.get(band, ()) if c.id not in chosen_ids]

        for short_band in list(deficits):
            while deficits[short_band] > 0 and available:
                candidate = available.pop()
                chosen.append(candidate)
                chosen_ids.add(candidate.id)
                deficits[short_band] -= 1
            if deficits[short_band] == 0:
                del deficits[short_band]

    # 3. Never return more than requested
    return chosen[: counts.total]
