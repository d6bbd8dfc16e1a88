"""Tests for wage normalization."""

import pytest

from wage_engine.calculators.normalizer import (
    MAX_HOURLY_CENTS,
    MIN_HOURLY_CENTS,
    NormalizationBounds,
    WagePeriod,
    normalize_to_hourly,
    parse_period,
    to_hourly,
)
from wage_engine.errors import (
    InvalidAmountError,
    InvalidHoursError,
    InvalidPeriodError,
    NormalizationError,
    OutOfBoundsError,
)


class TestPeriodConversion:
    """Test each period's conversion formula."""

    def test_hourly_is_identity(self):
        assert normalize_to_hourly(1500, "hourly") == 1500

    def test_weekly(self):
        # $600/week at 40h -> $15/hour
        assert normalize_to_hourly(60000, "weekly", 40) == 1500

    def test_biweekly(self):
        assert normalize_to_hourly(120000, "biweekly", 40) == 1500

    def test_monthly_uses_twelve_over_fifty_two(self):
        # 260000 * 12 / (52 * 40) = 1500 exactly
        assert normalize_to_hourly(260000, "monthly", 40) == 1500

    def test_yearly(self):
        # $31,200/year at 40h -> $15/hour
        assert normalize_to_hourly(3120000, "yearly", 40) == 1500

    def test_per_shift_uses_default_shift_hours(self):
        assert normalize_to_hourly(12000, "per_shift") == 1500

    def test_per_shift_with_explicit_shift_hours(self):
        assert normalize_to_hourly(12000, "per_shift", shift_hours=10) == 1200

    def test_hours_per_week_defaults_to_forty(self):
        assert normalize_to_hourly(60000, "weekly") == normalize_to_hourly(60000, "weekly", 40)

    def test_accepts_enum_values(self):
        assert normalize_to_hourly(60000, WagePeriod.WEEKLY, 40) == 1500

    def test_part_time_hours(self):
        # $600/week at 20h -> $30/hour
        assert normalize_to_hourly(60000, "weekly", 20) == 3000


class TestTruncation:
    """Division truncates, never rounds up."""

    def test_weekly_truncates(self):
        # 59999 / 40 = 1499.975
        assert normalize_to_hourly(59999, "weekly", 40) == 1499

    def test_monthly_truncates(self):
        # 250000 * 12 / 2080 = 1442.307...
        assert normalize_to_hourly(250000, "monthly", 40) == 1442

    def test_yearly_truncates(self):
        # 5000000 / 2080 = 2403.846...
        assert normalize_to_hourly(5000000, "yearly", 40) == 2403

    def test_per_shift_truncates(self):
        assert normalize_to_hourly(12007, "per_shift", shift_hours=8) == 1500

    def test_negative_amount_truncates_toward_zero(self):
        assert to_hourly(-59999, "weekly", 40) == -1499


class TestBounds:
    """Results outside [200, 20000] cents are rejected, not clamped."""

    def test_yearly_above_max_rejected(self):
        with pytest.raises(OutOfBoundsError) as exc_info:
            normalize_to_hourly(19999999, "yearly", 1)

        assert exc_info.value.normalized_cents == 384615
        assert exc_info.value.max_cents == MAX_HOURLY_CENTS

    def test_below_min_rejected(self):
        with pytest.raises(OutOfBoundsError) as exc_info:
            normalize_to_hourly(199, "hourly")

        assert exc_info.value.min_cents == MIN_HOURLY_CENTS

    def test_bounds_are_inclusive(self):
        assert normalize_to_hourly(MIN_HOURLY_CENTS, "hourly") == MIN_HOURLY_CENTS
        assert normalize_to_hourly(MAX_HOURLY_CENTS, "hourly") == MAX_HOURLY_CENTS

    def test_just_outside_bounds(self):
        with pytest.raises(OutOfBoundsError):
            normalize_to_hourly(MAX_HOURLY_CENTS + 1, "hourly")

    def test_truncation_can_fall_below_min(self):
        # 7999 / 40 = 199.975 -> 199
        with pytest.raises(OutOfBoundsError):
            normalize_to_hourly(7999, "weekly", 40)

    def test_custom_bounds(self):
        bounds = NormalizationBounds(min_hourly_cents=1000, max_hourly_cents=5000)
        with pytest.raises(OutOfBoundsError):
            normalize_to_hourly(900, "hourly", bounds=bounds)
        assert normalize_to_hourly(1000, "hourly", bounds=bounds) == 1000

    def test_error_message(self):
        with pytest.raises(OutOfBoundsError, match="384615 cents"):
            normalize_to_hourly(19999999, "yearly", 1)


class TestInvalidInputs:
    """Malformed inputs fail as validation errors."""

    def test_unknown_period(self):
        with pytest.raises(InvalidPeriodError) as exc_info:
            normalize_to_hourly(1500, "daily")

        assert exc_info.value.period == "daily"
        assert exc_info.value.field == "wage_period"

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            normalize_to_hourly(1500, "fortnightly")

    @pytest.mark.parametrize("hours", [0, -40])
    def test_non_positive_hours(self, hours):
        with pytest.raises(InvalidHoursError) as exc_info:
            normalize_to_hourly(60000, "weekly", hours)

        assert exc_info.value.field == "hours_per_week"

    def test_zero_shift_hours(self):
        with pytest.raises(InvalidHoursError) as exc_info:
            normalize_to_hourly(12000, "per_shift", shift_hours=0)

        assert exc_info.value.field == "shift_hours"

    def test_float_amount_rejected(self):
        with pytest.raises(InvalidAmountError):
            normalize_to_hourly(1500.5, "hourly")

    def test_all_subclass_normalization_error(self):
        for exc in (InvalidPeriodError, InvalidHoursError, InvalidAmountError, OutOfBoundsError):
            assert issubclass(exc, NormalizationError)

    def test_parse_period(self):
        assert parse_period("per_shift") is WagePeriod.PER_SHIFT
        with pytest.raises(InvalidPeriodError):
            parse_period("PER_SHIFT")
