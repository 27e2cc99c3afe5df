"""Domain-specific exceptions"""

from datetime import date


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InsufficientHistoricalDataError(DomainException):
    """Not enough occupancy history to produce a forecast"""

    def __init__(self, available_days: int, required_days: int):
        self.available_days = available_days
        self.required_days = required_days
        super().__init__(
            f"Insufficient historical data for forecasting. Need at least {required_days} days, "
            f"got {available_days}."
        )


class InvalidSampleError(DomainException):
    """Occupancy sample has impossible bed counts"""

    def __init__(self, sample_date: date, total_beds: int, occupied_beds: int):
        self.sample_date = sample_date
        self.total_beds = total_beds
        self.occupied_beds = occupied_beds
        super().__init__(
            f"Invalid occupancy sample for {sample_date.isoformat()}: "
            f"{occupied_beds} occupied of {total_beds} beds"
        )


class DuplicateSampleError(DomainException):
    """An occupancy sample already exists for that day"""

    pass


class InvoiceNotFoundError(DomainException):
    """Invoice does not exist"""

    pass


class InvalidPaymentAmountError(DomainException):
    """Payment amount must be positive"""

    pass


class BalanceExceededError(DomainException):
    """Payment would take the invoice past its total amount"""

    def __init__(self, remaining_cents: int, message: str | None = None):
        self.remaining_cents = remaining_cents
        super().__init__(
            message or f"Payment amount exceeds remaining balance. Remaining: {remaining_cents}"
        )


class InvoiceAlreadyPaidError(BalanceExceededError):
    """Invoice is PAID and accepts no further payments"""

    def __init__(self) -> None:
        super().__init__(0, "Invoice is already paid. Remaining: 0")


class PaymentConflictError(DomainException):
    """Another payment changed the invoice while this one was being recorded"""

    pass
