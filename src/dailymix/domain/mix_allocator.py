import math
from collections.abc import Mapping

from src.config import MixConfig
from src.dailymix.domain.models import Difficulty, MixCounts


class MixAllocationError(ValueError):
    """Raised when a total cannot hold the easy floor."""


def _round_half_up(value: float) -> int:
    # Negative weights count as nothing
    return max(0, math.floor(value + 0.5))


def _ratio(ratios: Mapping[str, float], band: Difficulty) -> float:
    value = ratios.get(band.value)
    if value is None:
        value = ratios.get(band)
    if value is None or math.isnan(value):
        return 0.0
    # Weights are capped at 1, so each band starts at no more than total
    return min(float(value), 1.0)


def min_easy_for(total: int) -> int:
    return max(
        MixConfig.MIN_EASY_FLOOR, _round_half_up(total * MixConfig.MIN_EASY_SHARE)
    )


def compute_mix(total: int, ratios: Mapping[str, float]) -> MixCounts:
    """
    Split ``total`` questions across the difficulty bands.

    Each band gets ``round(total * ratio)``, easy never drops below the floor,
    then the counts are nudged one at a time until they sum to ``total``:
    a surplus is taken from difficult, then moderate, then easy (down to the
    floor); a deficit goes to whichever of moderate/difficult is smaller,
    moderate on ties.

    Args:
        total: Session size, must be positive.
        ratios: Weights keyed by band value ("easy", ...). Missing keys are 0.

    Raises:
        MixAllocationError: ``total`` is not positive or is below the floor.

    Example:
        >>> compute_mix(10, {"easy": 0.8, "moderate": 0.2})
        MixCounts(easy=8, moderate=2, difficult=0)
    """
    if total <= 0:
        raise MixAllocationError(f"total must be positive, got {total}")

    min_easy = min_easy_for(total)
    if min_easy > total:
        raise MixAllocationError(
            f"total={total} cannot hold the easy floor of {min_easy}"
        )

    easy = max(min_easy, _round_half_up(total * _ratio(ratios, Difficulty.EASY)))
    moderate = _round_half_up(total * _ratio(ratios, Difficulty.MODERATE))
    difficult = _round_half_up(total * _ratio(ratios, Difficulty.DIFFICULT))

    while easy + moderate + difficult > total:
        if difficult > 0:
            difficult -= 1
        elif moderate > 0:
            moderate -= 1
        else:
            # min_easy <= total guarantees easy > min_easy here
            easy -= 1

    while easy + moderate + difficult < total:
        if moderate <= difficult:
            moderate += 1
        else:
            difficult += 1

    return MixCounts(easy=easy, moderate=moderate, difficult=difficult)
