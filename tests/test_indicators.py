"""Tests for the EMA engine contract."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from market_data.indicators import ema


class TestEmaLength:
    @given(
        series=st.lists(st.floats(min_value=1.0, max_value=1e6), max_size=60),
        period=st.integers(min_value=1, max_value=20),
    )
    @settings(max_examples=100)
    def test_output_length(self, series, period):
        assert len(ema(period, series)) == max(0, len(series) - period + 1)

    def test_too_short_series_is_empty(self):
        assert ema(5, [1.0, 2.0, 3.0]) == []

    def test_invalid_period(self):
        with pytest.raises(ValueError):
            ema(0, [1.0, 2.0])


class TestEmaValues:
    def test_period_one_is_identity(self):
        assert ema(1, [3.0, 1.0, 4.0]) == pytest.approx([3.0, 1.0, 4.0])

    def test_period_two(self):
        # a = 2/3 seeded with mean(4, 3)
        assert ema(2, [4.0, 3.0, 2.0, 1.0, 5.0]) == pytest.approx(
            [3.5, 2.5, 1.5, 23 / 6]
        )

    def test_period_three(self):
        # a = 1/2 seeded with mean(4, 3, 2)
        assert ema(3, [4.0, 3.0, 2.0, 1.0, 5.0]) == pytest.approx(
            [3.0, 2.0, 3.5]
        )

    def test_constant_series(self):
        assert ema(4, [7.0] * 10) == pytest.approx([7.0] * 7)

    def test_accepts_tuples(self):
        assert ema(2, (1.0, 2.0)) == pytest.approx([1.5])

    def test_seed_is_simple_average_of_first_period(self):
        # first-close seeding would give 1.5 here
        assert ema(3, [6.0, 0.0, 0.0]) == pytest.approx([2.0])
        assert ema(3, [6.0, 0.0, 0.0, 4.0]) == pytest.approx([2.0, 3.0])
