"""Unit tests for frame-rate parsing and resolution."""

from fractions import Fraction

import pytest

from transcode_planner.policy.framerate import (
    frame_rate_changed,
    frame_rate_divisor,
    parse_frame_rate,
    resolve_frame_rate,
)
from transcode_planner.policy.types.enums import FpsLimitMode
from transcode_planner.policy.types.options import FpsOptions


class TestParseFrameRate:
    """Tests for parse_frame_rate."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("24000/1001", Fraction(24000, 1001)),
            ("30/1", Fraction(30)),
            ("50/2", Fraction(25)),
            ("30", Fraction(30)),
            ("29.97", Fraction(2997, 100)),
        ],
    )
    def test_valid_rates(self, value: str, expected: Fraction) -> None:
        assert parse_frame_rate(value) == expected

    @pytest.mark.parametrize(
        "value", [None, "", "0/0", "25/0", "-25/1", "0", "abc", "1/2/3"]
    )
    def test_invalid_rates_return_none(self, value) -> None:
        assert parse_frame_rate(value) is None


class TestResolveFrameRate:
    """Tests for resolve_frame_rate."""

    def test_source_below_target_is_kept(self) -> None:
        request = FpsOptions(30, FpsLimitMode.EXACT)

        rate = Fraction(24000, 1001)

        assert resolve_frame_rate(rate, request) == rate

    def test_exact_clamps_to_target(self) -> None:
        request = FpsOptions(24, FpsLimitMode.EXACT)

        assert resolve_frame_rate(Fraction(30000, 1001), request) == Fraction(24)

    @pytest.mark.parametrize(
        ("source", "target", "expected"),
        [
            (Fraction(60), 30, Fraction(30)),
            (Fraction(120), 60, Fraction(60)),
            (Fraction(50), 24, Fraction(50, 3)),
            (Fraction(60000, 1001), 30, Fraction(30000, 1001)),
            (Fraction(30000, 1001), 30, Fraction(30000, 1001)),
        ],
    )
    def test_divide_by_integer(
        self, source: Fraction, target: int, expected: Fraction
    ) -> None:
        """Dividing keeps the cadence and never exceeds the target."""
        request = FpsOptions(target, FpsLimitMode.DIVIDE_BY_INTEGER)

        result = resolve_frame_rate(source, request)

        assert result == expected
        assert result <= target

    @pytest.mark.parametrize("mode", list(FpsLimitMode))
    def test_unknown_source_resolves_to_target(self, mode: FpsLimitMode) -> None:
        assert resolve_frame_rate(None, FpsOptions(25, mode)) == Fraction(25)

    def test_result_is_not_rounded(self) -> None:
        request = FpsOptions(20, FpsLimitMode.DIVIDE_BY_INTEGER)

        result = resolve_frame_rate(Fraction(30000, 1001), request)

        assert result == Fraction(15000, 1001)
        assert isinstance(result, Fraction)


class TestFrameRateHelpers:
    """Tests for the divisor and change helpers."""

    @pytest.mark.parametrize(
        ("source", "target", "divisor"),
        [(Fraction(24), 30, 1), (Fraction(60), 30, 2), (Fraction(50), 24, 3)],
    )
    def test_divisor(self, source: Fraction, target: int, divisor: int) -> None:
        assert frame_rate_divisor(source, target) == divisor

    def test_unknown_source_is_not_a_change(self) -> None:
        assert frame_rate_changed(None, Fraction(30)) is False

    def test_clamped_source_is_a_change(self) -> None:
        assert frame_rate_changed(Fraction(60), Fraction(30)) is True

    def test_equal_rate_is_not_a_change(self) -> None:
        assert frame_rate_changed(Fraction(30), Fraction(30)) is False


class TestFpsOptions:
    """Tests for FpsOptions validation."""

    @pytest.mark.parametrize("value", [0, -30, 29.97, True])
    def test_invalid_target_raises(self, value) -> None:
        with pytest.raises(ValueError, match="target_fps must be a positive integer"):
            FpsOptions(value)

    def test_mode_must_be_enum(self) -> None:
        with pytest.raises(ValueError, match="fps mode"):
            FpsOptions(30, "exact")
