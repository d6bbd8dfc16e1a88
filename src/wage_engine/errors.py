"""Exception taxonomy for the wage pipeline."""

from __future__ import annotations


class WageEngineError(Exception):
    """Base class for wage engine errors."""


class ConfigurationError(WageEngineError):
    """Raised when an environment setting cannot be used."""

    def __init__(self, setting: str, reason: str):
        self.setting = setting
        self.reason = reason
        super().__init__(f"Invalid setting {setting}: {reason}")


class NormalizationError(WageEngineError, ValueError):
    """A wage could not be converted to a canonical hourly rate.

    Always surfaced to the caller as a validation error. The write that
    triggered it must not persist anything.
    """

    field = "amount_cents"


class InvalidPeriodError(NormalizationError):
    """Raised for an unrecognized wage period."""

    field = "wage_period"

    def __init__(self, period: object):
        self.period = period
        super().__init__(f"Invalid wage period: {period}")


class InvalidHoursError(NormalizationError):
    """Raised when hours per week or shift hours cannot be divided by."""

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field}: {value} (must be a positive integer)")


class InvalidAmountError(NormalizationError):
    """Raised when the submitted amount is not a whole number of cents."""

    def __init__(self, amount: object):
        self.amount = amount
        super().__init__(f"Invalid amount_cents: {amount!r} (must be an integer)")


class OutOfBoundsError(NormalizationError):
    """Raised when the normalized hourly wage falls outside the accepted range."""

    def __init__(self, normalized_cents: int, min_cents: int, max_cents: int):
        self.normalized_cents = normalized_cents
        self.min_cents = min_cents
        self.max_cents = max_cents
        super().__init__(
            f"Normalized hourly wage ({normalized_cents} cents) is outside acceptable range "
            f"[{min_cents}, {max_cents}]"
        )


class InvalidStatusError(WageEngineError, ValueError):
    """Raised for a status value outside pending/approved/rejected."""

    field = "status"

    def __init__(self, status: object):
        self.status = status
        super().__init__(f"Invalid wage report status: {status}")


class LocationNotFoundError(WageEngineError, LookupError):
    """Raised when a report references a location that does not exist."""

    field = "location_id"

    def __init__(self, location_id: int):
        self.location_id = location_id
        super().__init__(f"Location {location_id} not found")


class ReportNotFoundError(WageEngineError, LookupError):
    """Raised when a wage report id does not resolve."""

    def __init__(self, report_id: int, include_deleted: bool = False):
        self.report_id = report_id
        self.include_deleted = include_deleted
        super().__init__(f"Wage report {report_id} not found")
