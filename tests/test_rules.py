"""Property-based tests for the crossover rules.

*For any* pair of fast/slow samples, a cross is reported only on a strict
change of ordering; equal values never count as a cross.
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from decision_service.rules import Side, Signal, cross_of, detect_cross, pnl

values = st.floats(min_value=-1e9, max_value=1e9, allow_nan=False)


class TestDetectCross:
    @given(values, values, values, values)
    @settings(max_examples=300)
    def test_matches_definition(self, prev_fast, prev_slow, fast, slow):
        got = detect_cross(prev_fast, prev_slow, fast, slow)
        if prev_fast < prev_slow and fast > slow:
            assert got is Signal.GOLDEN
        elif prev_fast > prev_slow and fast < slow:
            assert got is Signal.DEATH
        else:
            assert got is Signal.NONE

    @given(values, values)
    def test_equal_values_are_never_a_cross(self, a, b):
        assert detect_cross(a, a, b, b - 1) is Signal.NONE
        assert detect_cross(a, a, b, b + 1) is Signal.NONE
        assert detect_cross(a, a + 1, b, b) is Signal.NONE
        assert detect_cross(a, a - 1, b, b) is Signal.NONE

    @pytest.mark.parametrize(
        "args, expected",
        [
            ((1.0, 2.0, 3.0, 2.0), Signal.GOLDEN),
            ((3.0, 2.0, 1.0, 2.0), Signal.DEATH),
            ((1.0, 2.0, 1.5, 2.0), Signal.NONE),    # still below
            ((3.0, 2.0, 4.0, 2.0), Signal.NONE),    # still above
            ((1.0, 2.0, 2.0, 2.0), Signal.NONE),    # touches, no cross
            ((2.0, 2.0, 3.0, 2.0), Signal.NONE),    # started level
        ],
    )
    def test_examples(self, args, expected):
        assert detect_cross(*args) is expected


class TestCrossOf:
    def test_uses_last_two_values(self):
        assert cross_of([9.0, 1.0, 3.0], [0.0, 2.0, 2.0]) is Signal.GOLDEN
        assert cross_of([0.0, 3.0, 1.0], [9.0, 2.0, 2.0]) is Signal.DEATH

    def test_series_of_different_length(self):
        # fast EMA has more warm-up values than slow; tails are aligned
        assert cross_of([5.0, 4.0, 1.0, 3.0], [2.0, 2.0]) is Signal.GOLDEN

    @pytest.mark.parametrize("fast, slow", [([], []), ([1.0], [2.0]), ([1.0, 3.0], [2.0])])
    def test_short_series_is_no_cross(self, fast, slow):
        assert cross_of(fast, slow) is Signal.NONE


class TestSide:
    def test_sign(self):
        assert Side.LONG.sign == 1
        assert Side.SHORT.sign == -1

    def test_entry_mapping(self):
        assert Side.for_entry(Signal.GOLDEN) is Side.LONG
        assert Side.for_entry(Signal.DEATH) is Side.SHORT
        assert Side.for_entry(Signal.NONE) is None

    def test_exit_signal(self):
        assert Side.LONG.exit_signal is Signal.DEATH
        assert Side.SHORT.exit_signal is Signal.GOLDEN

    def test_round_trips_from_stored_string(self):
        assert Side("LONG") is Side.LONG
        assert Side.SHORT.value == "SHORT"


class TestPnl:
    def test_long_loss(self):
        assert pnl(Side.LONG, 100.0, 90.0, 1) == -10.0

    def test_short_gain(self):
        assert pnl(Side.SHORT, 100.0, 90.0, 1) == 10.0

    def test_quantity_scales(self):
        assert pnl(Side.LONG, 10.0, 12.5, 4) == 10.0

    @given(
        st.floats(min_value=0.01, max_value=1e6),
        st.floats(min_value=0.01, max_value=1e6),
        st.integers(min_value=1, max_value=100),
    )
    def test_sides_are_mirror_images(self, entry, exit_, qty):
        assert pnl(Side.LONG, entry, exit_, qty) == -pnl(Side.SHORT, entry, exit_, qty)
