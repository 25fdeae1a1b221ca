import pytest

from src.dailymix.domain.mix_allocator import (
    MixAllocationError,
    compute_mix,
    min_easy_for,
)
from src.dailymix.domain.models import Difficulty

RATIO_GRID = [
    {},
    {"easy": 0.8, "moderate": 0.2, "difficult": 0.0},
    {"easy": 0.0, "moderate": 0.5, "difficult": 0.5},
    {"easy": 0.21, "moderate": 0.39, "difficult": 0.4},
    {"easy": 0.33, "moderate": 0.33, "difficult": 0.33},
    {"easy": 1.0, "moderate": 1.0, "difficult": 1.0},
    {"easy": 0.0, "moderate": 0.0, "difficult": 1.0},
    {"easy": 0.1, "moderate": 0.05, "difficult": 0.05},
    {"easy": -0.5, "moderate": 0.7, "difficult": -0.2},
    {"moderate": 0.45},
]


class TestKnownMixes:
    def test_ratio_dominance(self):
        """Default-style ratio gives mostly easy questions."""
        mix = compute_mix(10, {"easy": 0.8, "moderate": 0.2, "difficult": 0})

        assert (mix.easy, mix.moderate, mix.difficult) == (8, 2, 0)

    def test_zero_easy_preference_still_gets_floor(self):
        mix = compute_mix(10, {"easy": 0, "moderate": 0.5, "difficult": 0.5})

        assert mix.easy >= 2
        assert mix.total == 10
        # Surplus comes off difficult first
        assert (mix.easy, mix.moderate, mix.difficult) == (2, 5, 3)

    def test_rounding_deficit_is_filled(self):
        mix = compute_mix(10, {"easy": 0.21, "moderate": 0.39, "difficult": 0.4})

        assert mix.total == 10
        assert (mix.easy, mix.moderate, mix.difficult) == (2, 4, 4)

    def test_deficit_alternates_moderate_then_difficult(self):
        """Moderate wins ties, so the two bands grow in turn."""
        mix = compute_mix(10, {"easy": 0.2, "moderate": 0.1, "difficult": 0.1})

        assert (mix.easy, mix.moderate, mix.difficult) == (2, 4, 4)

    def test_deficit_never_goes_to_easy(self):
        mix = compute_mix(10, {})

        assert (mix.easy, mix.moderate, mix.difficult) == (2, 4, 4)

    def test_deficit_goes_to_smaller_band(self):
        mix = compute_mix(10, {"easy": 0.2, "moderate": 0.6, "difficult": 0.0})

        # 2 + 6 + 0 = 8: both extra questions go to difficult
        assert (mix.easy, mix.moderate, mix.difficult) == (2, 6, 2)

    def test_surplus_drains_difficult_then_moderate(self):
        mix = compute_mix(10, {"easy": 1.0, "moderate": 0.5, "difficult": 0.5})

        assert (mix.easy, mix.moderate, mix.difficult) == (10, 0, 0)

    def test_surplus_reduces_easy_down_to_total(self):
        mix = compute_mix(10, {"easy": 1.5})

        assert (mix.easy, mix.moderate, mix.difficult) == (10, 0, 0)

    def test_moderate_reduced_when_difficult_is_empty(self):
        mix = compute_mix(20, {"easy": 0.0, "moderate": 1.0, "difficult": 0.0})

        assert (mix.easy, mix.moderate, mix.difficult) == (4, 16, 0)

    def test_half_rounds_up(self):
        # 5 * 0.5 = 2.5 -> 3 for both easy and moderate, surplus taken from moderate
        mix = compute_mix(5, {"easy": 0.5, "moderate": 0.5})

        assert (mix.easy, mix.moderate, mix.difficult) == (3, 2, 0)

    def test_negative_ratios_count_as_zero(self):
        mix = compute_mix(10, {"easy": 0.5, "moderate": -0.3, "difficult": 0.5})

        assert (mix.easy, mix.moderate, mix.difficult) == (5, 0, 5)

    def test_accepts_enum_keys(self):
        mix = compute_mix(10, {Difficulty.EASY: 0.8, Difficulty.MODERATE: 0.2})

        assert (mix.easy, mix.moderate, mix.difficult) == (8, 2, 0)

    def test_smallest_valid_total(self):
        mix = compute_mix(2, {"difficult": 1.0})

        assert (mix.easy, mix.moderate, mix.difficult) == (2, 0, 0)


class TestPreconditions:
    @pytest.mark.parametrize("total", [0, -1, -10])
    def test_rejects_non_positive_total(self, total):
        with pytest.raises(MixAllocationError):
            compute_mix(total, {"easy": 1.0})

    def test_rejects_total_below_floor(self):
        """A single question cannot hold the floor of two easy ones."""
        with pytest.raises(MixAllocationError, match="easy floor"):
            compute_mix(1, {"easy": 1.0})

    def test_error_is_a_value_error(self):
        assert issubclass(MixAllocationError, ValueError)


class TestInvariants:
    @pytest.mark.parametrize("ratios", RATIO_GRID)
    def test_counts_sum_to_total(self, ratios):
        for total in range(2, 41):
            mix = compute_mix(total, ratios)
            assert mix.total == total, (total, ratios, mix)
            assert min(mix.easy, mix.moderate, mix.difficult) >= 0

    @pytest.mark.parametrize("ratios", RATIO_GRID)
    def test_easy_floor_holds(self, ratios):
        for total in range(10, 41):
            mix = compute_mix(total, ratios)
            assert mix.easy >= max(2, round(total * 0.2)), (total, ratios, mix)

    def test_min_easy_for(self):
        assert min_easy_for(2) == 2
        assert min_easy_for(10) == 2
        assert min_easy_for(13) == 3  # 2.6 -> 3
        assert min_easy_for(25) == 5
        assert min_easy_for(50) == 10


class TestOutOfRangeWeights:
    def test_huge_weight_is_capped_at_one(self):
        """Each band starts at most at total, so correction stays short."""
        mix = compute_mix(10, {"difficult": 1e9})

        assert (mix.easy, mix.moderate, mix.difficult) == (2, 0, 8)

    def test_infinite_weight_is_capped(self):
        mix = compute_mix(10, {"moderate": float("inf")})

        assert (mix.easy, mix.moderate, mix.difficult) == (2, 8, 0)

    def test_nan_weight_counts_as_zero(self):
        mix = compute_mix(10, {"easy": 0.8, "moderate": float("nan")})

        assert (mix.easy, mix.moderate, mix.difficult) == (8, 1, 1)
