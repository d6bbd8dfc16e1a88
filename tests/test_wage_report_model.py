"""Tests for WageReport display and moderation helpers."""

from datetime import datetime, timezone

import pytest

from wage_engine.models import WageReport, format_money


def make_report(**overrides) -> WageReport:
    fields = {
        "location_id": 1,
        "job_title": "Barista",
        "employment_type": "full_time",
        "wage_period": "hourly",
        "currency": "USD",
        "amount_cents": 1500,
        "normalized_hourly_cents": 1500,
        "sanity_score": 5,
        "status": "approved",
    }
    fields.update(overrides)
    return WageReport(**fields)


class TestFormatMoney:
    @pytest.mark.parametrize(
        "cents,expected",
        [
            (1500, "$15.00"),
            (0, "$0.00"),
            (5, "$0.05"),
            (725, "$7.25"),
            (123456789, "$1,234,567.89"),
            (-1500, "-$15.00"),
            (-5, "-$0.05"),
        ],
    )
    def test_format(self, cents, expected):
        assert format_money(cents) == expected

    def test_report_money(self):
        report = make_report(amount_cents=6000000, wage_period="yearly", normalized_hourly_cents=2884)

        assert report.original_amount_money() == "$60,000.00"
        assert report.normalized_hourly_money() == "$28.84"


class TestFlags:
    @pytest.mark.parametrize("score,expected", [(-5, True), (-3, True), (-2, False), (0, False), (5, False)])
    def test_is_outlier(self, score, expected):
        assert make_report(sanity_score=score).is_outlier is expected

    @pytest.mark.parametrize("cents,expected", [(10001, True), (10000, False), (1500, False)])
    def test_is_suspiciously_high(self, cents, expected):
        assert make_report(normalized_hourly_cents=cents).is_suspiciously_high is expected

    @pytest.mark.parametrize("cents,expected", [(724, True), (725, False), (1500, False)])
    def test_is_suspiciously_low(self, cents, expected):
        assert make_report(normalized_hourly_cents=cents).is_suspiciously_low is expected

    def test_is_counted(self):
        assert make_report().is_counted is True
        assert make_report(status="pending").is_counted is False

    def test_deleted_report_is_not_counted(self):
        report = make_report(deleted_at=datetime(2024, 1, 1, tzinfo=timezone.utc))

        assert report.is_deleted is True
        assert report.is_counted is False


class TestDisplayLabels:
    @pytest.mark.parametrize(
        "period,label",
        [
            ("hourly", "Hourly"),
            ("weekly", "Weekly"),
            ("biweekly", "Bi-weekly"),
            ("monthly", "Monthly"),
            ("yearly", "Yearly"),
            ("per_shift", "Per Shift"),
        ],
    )
    def test_wage_period_display(self, period, label):
        assert make_report(wage_period=period).wage_period_display == label

    @pytest.mark.parametrize(
        "employment_type,label",
        [
            ("full_time", "Full Time"),
            ("part_time", "Part Time"),
            ("seasonal", "Seasonal"),
            ("contract", "Contract"),
        ],
    )
    def test_employment_type_display(self, employment_type, label):
        assert make_report(employment_type=employment_type).employment_type_display == label

    @pytest.mark.parametrize(
        "status,label", [("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")]
    )
    def test_status_display(self, status, label):
        assert make_report(status=status).status_display == label
